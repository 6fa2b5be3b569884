"""HTTP surface tests: routing, camelCase wire format and error mapping."""
import base64

import pytest
from fastapi.testclient import TestClient

from therapy_records.main import create_app

API = "/api/v1"


@pytest.fixture()
def client(store, attachments):
    app = create_app(store=store, attachments=attachments)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def patient_id(client):
    resp = client.post(f"{API}/patients/", json={"name": "Ravi Kumar", "height": 180, "weight": 72})
    return resp.json()["id"]


@pytest.fixture()
def disease_id(client, patient_id):
    resp = client.post(f"{API}/diseases/", json={"patientId": patient_id, "nameOfDisease": "Frozen shoulder"})
    return resp.json()["id"]


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestPatientsApi:
    def test_create_fills_bmi_and_uses_camel_case(self, client):
        resp = client.post(f"{API}/patients/", json={
            "name": "Ravi Kumar",
            "height": 180,
            "weight": 72,
            "placeOfResidence": "Chennai",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["bmi"] == 22.22
        assert body["placeOfResidence"] == "Chennai"
        assert "date" in body
        assert "place_of_residence" not in body

    def test_explicit_bmi_is_kept(self, client):
        resp = client.post(f"{API}/patients/", json={"name": "A", "height": 180, "weight": 72, "bmi": 21.0})
        assert resp.json()["bmi"] == 21.0

    def test_missing_name(self, client):
        resp = client.post(f"{API}/patients/", json={"age": 30})
        assert resp.status_code == 422

    def test_get_with_diseases(self, client, patient_id, disease_id):
        resp = client.get(f"{API}/patients/{patient_id}")
        assert resp.status_code == 200
        assert [d["id"] for d in resp.json()["diseases"]] == [disease_id]

    def test_unknown_patient_is_404(self, client):
        resp = client.get(f"{API}/patients/999")
        assert resp.status_code == 404
        assert resp.json()["error"] == "NotFoundError"

    def test_update_recomputes_missing_bmi(self, client, patient_id):
        resp = client.patch(f"{API}/patients/{patient_id}", json={"weight": 81})
        assert resp.status_code == 200
        # height comes from the stored record
        assert resp.json()["bmi"] == 25.0
        resp = client.patch(f"{API}/patients/{patient_id}", json={"height": 200})
        assert resp.json()["bmi"] == 20.25
        resp = client.patch(f"{API}/patients/{patient_id}", json={"age": 41})
        assert resp.json()["bmi"] == 20.25

    def test_update_cannot_clear_name(self, client, patient_id):
        resp = client.patch(f"{API}/patients/{patient_id}", json={"name": None})
        assert resp.status_code == 422
        assert client.get(f"{API}/patients/{patient_id}").json()["name"] == "Ravi Kumar"

    def test_delete_cascades(self, client, patient_id, disease_id):
        assert client.delete(f"{API}/patients/{patient_id}").status_code == 200
        assert client.get(f"{API}/diseases/{disease_id}").status_code == 404
        assert client.get(f"{API}/patients/").json() == []


class TestDiseaseAndTherapyApi:
    def test_disease_for_unknown_patient(self, client):
        resp = client.post(f"{API}/diseases/", json={"patientId": 42, "nameOfDisease": "x"})
        assert resp.status_code == 404

    def test_duplicate_medical_history_is_422(self, client, disease_id):
        assert client.post(f"{API}/medical-histories/", json={"diseaseId": disease_id}).status_code == 201
        resp = client.post(f"{API}/medical-histories/", json={"diseaseId": disease_id})
        assert resp.status_code == 422
        assert resp.json()["error"] == "ValidationError"

    def test_therapy_tools_composite(self, client, disease_id):
        therapy = client.post(f"{API}/therapies/", json={"diseaseId": disease_id, "name": "Shoulder"}).json()
        resp = client.post(f"{API}/therapy-tools/", json={
            "therapyId": therapy["id"],
            "yoga": {"poses": "Gomukhasana", "repeatingTimingsPerDay": 2},
        })
        assert resp.status_code == 201
        tools = resp.json()
        assert tools["yoga"]["poses"] == "Gomukhasana"
        assert tools["yoga"]["repeatingTimingsPerDay"] == 2
        assert tools["breathingExercises"] is None

        resp = client.get(f"{API}/diseases/{disease_id}")
        detail = resp.json()
        assert detail["therapies"][0]["therapyTools"]["id"] == tools["id"]

        resp = client.get(f"{API}/therapies/{therapy['id']}/therapy-tools")
        assert resp.json()["id"] == tools["id"]

    def test_negative_count_is_422(self, client, disease_id):
        therapy = client.post(f"{API}/therapies/", json={"diseaseId": disease_id}).json()
        resp = client.post(f"{API}/therapy-tools/", json={
            "therapyId": therapy["id"],
            "mudras": {"mudraNames": "Gyan", "repeatingTimingsPerDay": -1},
        })
        assert resp.status_code == 422

    def test_satellite_endpoints(self, client, disease_id):
        therapy = client.post(f"{API}/therapies/", json={"diseaseId": disease_id}).json()
        tools = client.post(f"{API}/therapy-tools/", json={"therapyId": therapy["id"]}).json()
        resp = client.post(f"{API}/satellites/pranayama", json={"therapyToolsId": tools["id"], "techniques": "Ujjayi"})
        assert resp.status_code == 201
        created = resp.json()
        assert created["therapyToolsId"] == tools["id"]

        resp = client.get(f"{API}/satellites/pranayama/by-tools/{tools['id']}")
        assert [s["id"] for s in resp.json()] == [created["id"]]
        assert client.get(f"{API}/satellites/tai-chi/1").status_code == 422


class TestMedicalReportsApi:
    def test_multipart_upload_and_view(self, client, disease_id):
        resp = client.post(
            f"{API}/medical-reports/",
            files={"file": ("report1.pdf", b"%PDF-1.4", "application/pdf")},
            data={"disease_id": str(disease_id)},
        )
        assert resp.status_code == 201
        report = resp.json()
        assert report["fileName"] == "report1.pdf"
        assert report["diseaseId"] == disease_id

        listed = client.get(f"{API}/medical-reports/disease/{disease_id}").json()
        assert [r["id"] for r in listed] == [report["id"]]

        content = client.get(f"{API}/medical-reports/{report['id']}/content").json()
        assert base64.b64decode(content["data"]) == b"%PDF-1.4"
        assert content["fileType"] == ".pdf"

        assert client.delete(f"{API}/medical-reports/{report['id']}").status_code == 200
        assert client.get(f"{API}/medical-reports/disease/{disease_id}").json() == []

    def test_rejects_unsupported_type(self, client, disease_id):
        resp = client.post(
            f"{API}/medical-reports/",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"disease_id": str(disease_id)},
        )
        assert resp.status_code == 422


class TestOperationsBridge:
    def test_lists_channel_names(self, client):
        names = client.get(f"{API}/ops/").json()["operations"]
        assert "get-patients" in names
        assert "create-therapy-tools" in names
        assert "get-breathing-exercises-by-therapy-tools" in names
        assert "open-medical-report" in names

    def test_create_and_update_through_channels(self, client):
        created = client.post(f"{API}/ops/create-patient", json={"arg": {"name": "Meera"}}).json()
        assert created["name"] == "Meera"

        updated = client.post(f"{API}/ops/update-patient", json={
            "arg": {"id": created["id"], "data": {"natureOfWork": "Teacher"}},
        }).json()
        assert updated["natureOfWork"] == "Teacher"

        listed = client.post(f"{API}/ops/get-patients", json={}).json()
        assert [p["name"] for p in listed] == ["Meera"]

    def test_update_without_id(self, client):
        resp = client.post(f"{API}/ops/update-patient", json={"arg": {"data": {}}})
        assert resp.status_code == 422

    def test_unknown_channel(self, client):
        resp = client.post(f"{API}/ops/launch-rocket", json={"arg": 1})
        assert resp.status_code == 404

    def test_therapy_tools_lookup_without_tools(self, client, disease_id):
        therapy = client.post(f"{API}/ops/create-therapy", json={"arg": {"diseaseId": disease_id}}).json()
        resp = client.post(f"{API}/ops/get-therapy-tools-by-therapy", json={"arg": therapy["id"]})
        assert resp.status_code == 404
