"""Shared fixtures: an isolated in-memory record store per test."""
import pytest

from therapy_records.core.database import RecordStore
from therapy_records.services.attachment_store import AttachmentStore
from therapy_records.services.record_gateway import RecordGateway


@pytest.fixture()
def store():
    """Provide an isolated in-memory SQLite database for each test."""
    record_store = RecordStore("sqlite:///:memory:", echo=False).open()
    yield record_store
    record_store.close()


@pytest.fixture()
def gateway(store):
    return RecordGateway(store)


@pytest.fixture()
def reports_dir(tmp_path):
    return tmp_path / "reports"


@pytest.fixture()
def attachments(store, reports_dir):
    return AttachmentStore(store, reports_dir=str(reports_dir), chooser=lambda title, filetypes: None)


@pytest.fixture()
def patient(gateway):
    return gateway.create_patient({"name": "Asha Rao", "age": 52, "gender": "Female"})


@pytest.fixture()
def disease(gateway, patient):
    return gateway.create_disease({
        "patientId": patient.id,
        "nameOfDisease": "Cervical spondylosis",
        "chiefComplaint": "Neck stiffness",
    })


@pytest.fixture()
def therapy(gateway, disease):
    return gateway.create_therapy({
        "diseaseId": disease.id,
        "name": "Neck mobility",
        "fitnessOrTherapy": "Therapy",
    })
