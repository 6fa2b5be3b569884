"""Tests for the record gateway: CRUD, cascades, and therapy tools composites."""
import pytest

from therapy_records.core.errors import NotFoundError, ValidationError
from therapy_records.schemas import PatientCreate


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

class TestPatients:
    def test_create_and_list_in_insertion_order(self, gateway):
        first = gateway.create_patient({"name": "First"})
        second = gateway.create_patient(PatientCreate(name="Second", age=40))
        names = [p.name for p in gateway.list_patients()]
        assert names == ["First", "Second"]
        assert second.id > first.id
        assert second.age == 40

    def test_registration_date_defaults_to_now(self, gateway):
        patient = gateway.create_patient({"name": "No date"})
        assert patient.registration_date is not None
        assert patient.created_at is not None

    def test_missing_name_is_rejected(self, gateway):
        with pytest.raises(ValidationError):
            gateway.create_patient({"age": 30})

    def test_get_includes_diseases(self, gateway, patient, disease):
        detail = gateway.get_patient(patient.id)
        assert [d.id for d in detail.diseases] == [disease.id]

    def test_get_accepts_numeric_string_id(self, gateway, patient):
        assert gateway.get_patient(str(patient.id)).name == "Asha Rao"

    def test_non_numeric_id_is_validation_error(self, gateway):
        with pytest.raises(ValidationError):
            gateway.get_patient("abc")

    def test_update_replaces_only_supplied_fields(self, gateway, patient):
        updated = gateway.update_patient(patient.id, {"placeOfResidence": "Mysuru", "diseases": [{"id": 99}]})
        assert updated.place_of_residence == "Mysuru"
        assert updated.age == 52
        assert updated.gender == "Female"

    def test_update_missing_patient(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.update_patient(404, {"name": "Ghost"})

    @pytest.mark.parametrize("name", [None, "  "])
    def test_update_cannot_clear_name(self, gateway, patient, name):
        with pytest.raises(ValidationError):
            gateway.update_patient(patient.id, {"name": name})
        assert gateway.get_patient(patient.id).name == "Asha Rao"

    def test_delete_cascades_to_diseases_and_histories(self, gateway, patient):
        d1 = gateway.create_disease({"patientId": patient.id, "nameOfDisease": "Asthma"})
        d2 = gateway.create_disease({"patientId": patient.id, "nameOfDisease": "Migraine"})
        history = gateway.create_medical_history({"diseaseId": d1.id, "hereditary": True})

        deleted = gateway.delete_patient(patient.id)
        assert deleted.id == patient.id

        for disease_id in (d1.id, d2.id):
            with pytest.raises(NotFoundError):
                gateway.get_disease(disease_id)
        with pytest.raises(NotFoundError):
            gateway.get_medical_history(history.id)
        with pytest.raises(NotFoundError):
            gateway.get_patient(patient.id)

    def test_delete_leaves_other_patients_alone(self, gateway, patient, disease):
        other = gateway.create_patient({"name": "Other"})
        other_disease = gateway.create_disease({"patientId": other.id, "nameOfDisease": "Gout"})
        gateway.delete_patient(patient.id)
        assert gateway.get_disease(other_disease.id).name_of_disease == "Gout"

    def test_delete_missing_patient(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.delete_patient(12345)


# ---------------------------------------------------------------------------
# Diseases & medical history
# ---------------------------------------------------------------------------

class TestDiseases:
    def test_create_requires_patient_id(self, gateway):
        with pytest.raises(ValidationError):
            gateway.create_disease({"nameOfDisease": "Orphan"})

    def test_create_rejects_non_numeric_patient_id(self, gateway):
        with pytest.raises(ValidationError):
            gateway.create_disease({"patientId": "seven", "nameOfDisease": "Orphan"})

    def test_create_coerces_string_patient_id(self, gateway, patient):
        disease = gateway.create_disease({"patientId": str(patient.id), "nameOfDisease": "Sciatica"})
        assert disease.patient_id == patient.id

    def test_create_for_unknown_patient(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.create_disease({"patientId": 77, "nameOfDisease": "Orphan"})

    def test_embedded_relations_are_ignored(self, gateway, patient):
        disease = gateway.create_disease({
            "patientId": patient.id,
            "nameOfDisease": "Sciatica",
            "medicalHistory": {"hereditary": True},
            "therapies": [{"name": "x"}],
        })
        detail = gateway.get_disease(disease.id)
        assert detail.medical_history is None
        assert detail.therapies == []

    def test_list_by_patient(self, gateway, patient, disease):
        gateway.create_disease({"patientId": patient.id, "nameOfDisease": "Tinnitus"})
        names = [d.name_of_disease for d in gateway.list_diseases(patient.id)]
        assert names == ["Cervical spondylosis", "Tinnitus"]
        assert gateway.list_diseases(999) == []

    def test_get_returns_full_record_graph(self, gateway, disease, therapy):
        gateway.create_medical_history({"diseaseId": disease.id, "childhoodIllness": "Measles"})
        gateway.create_therapy_tools({
            "therapyId": therapy.id,
            "yoga": {"poses": "Tadasana", "repeatingTimingsPerDay": 2},
        })
        detail = gateway.get_disease(disease.id)
        assert detail.medical_history.childhood_illness == "Measles"
        assert len(detail.therapies) == 1
        tools = detail.therapies[0].therapy_tools
        assert tools.yoga.poses == "Tadasana"
        assert tools.pranayama is None

    def test_update_cannot_move_disease_to_another_patient(self, gateway, disease):
        other = gateway.create_patient({"name": "Other"})
        with pytest.raises(ValidationError):
            gateway.update_disease(disease.id, {"patientId": other.id, "severity": "High"})

    def test_update_with_same_patient_id(self, gateway, disease):
        updated = gateway.update_disease(disease.id, {"patientId": disease.patient_id, "severity": "High"})
        assert updated.severity == "High"
        assert updated.chief_complaint == "Neck stiffness"

    def test_delete_cascades_medical_history_but_keeps_therapies(self, gateway, disease, therapy):
        history = gateway.create_medical_history({"diseaseId": disease.id})
        gateway.delete_disease(disease.id)
        with pytest.raises(NotFoundError):
            gateway.get_medical_history(history.id)
        assert gateway.get_therapy(therapy.id).disease_id == disease.id

    def test_new_disease_does_not_inherit_retained_therapies(self, gateway, patient, disease, therapy):
        gateway.delete_disease(disease.id)
        other = gateway.create_patient({"name": "Other"})
        fresh = gateway.create_disease({"patientId": other.id, "nameOfDisease": "Gout"})
        assert fresh.id != disease.id
        assert gateway.get_disease(fresh.id).therapies == []
        assert gateway.list_therapies(fresh.id) == []

    def test_delete_missing_disease(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.delete_disease(31)


class TestMedicalHistory:
    def test_one_history_per_disease(self, gateway, disease):
        gateway.create_medical_history({"diseaseId": disease.id})
        with pytest.raises(ValidationError):
            gateway.create_medical_history({"diseaseId": disease.id})

    def test_hereditary_defaults_to_false(self, gateway, disease):
        history = gateway.create_medical_history({"diseaseId": disease.id})
        assert history.hereditary is False

    def test_update_and_delete(self, gateway, disease):
        history = gateway.create_medical_history({"diseaseId": disease.id})
        updated = gateway.update_medical_history(history.id, {"hereditary": True, "operationsOrSurgeries": "None"})
        assert updated.hereditary is True
        gateway.delete_medical_history(history.id)
        assert gateway.list_medical_histories(disease.id) == []

    def test_create_for_unknown_disease(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.create_medical_history({"diseaseId": 8})


# ---------------------------------------------------------------------------
# Therapies
# ---------------------------------------------------------------------------

class TestTherapies:
    def test_round_trip_has_no_therapy_tools(self, gateway, disease):
        payload = {
            "diseaseId": disease.id,
            "name": "Knee care",
            "fitnessOrTherapy": "Fitness",
            "homeRemedies": "Warm compress",
            "sideEffects": "None noted",
        }
        created = gateway.create_therapy(payload)
        fetched = gateway.get_therapy(created.id)

        assert fetched.id == created.id
        assert fetched.disease_id == disease.id
        assert fetched.name == "Knee care"
        assert fetched.fitness_or_therapy == "Fitness"
        assert fetched.home_remedies == "Warm compress"
        assert fetched.side_effects == "None noted"
        assert fetched.diet_reference is None
        assert fetched.therapy_tools is None

    def test_update_ignores_relations_and_timestamps(self, gateway, therapy):
        updated = gateway.update_therapy(therapy.id, {
            "id": 999,
            "name": "Neck mobility II",
            "therapyTools": {"mantras": "ignored"},
            "createdAt": "2000-01-01T00:00:00",
        })
        assert updated.id == therapy.id
        assert updated.name == "Neck mobility II"
        assert updated.created_at == therapy.created_at

    def test_list_and_delete(self, gateway, disease, therapy):
        assert [t.id for t in gateway.list_therapies(disease.id)] == [therapy.id]
        gateway.delete_therapy(therapy.id)
        assert gateway.list_therapies(disease.id) == []
        with pytest.raises(NotFoundError):
            gateway.delete_therapy(therapy.id)


# ---------------------------------------------------------------------------
# Therapy tools & satellites
# ---------------------------------------------------------------------------

class TestTherapyTools:
    def test_only_yoga_poses_creates_only_yoga(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id, "yoga": {"poses": "Vrikshasana"}})
        assert tools.yoga is not None
        assert tools.yoga.poses == "Vrikshasana"
        assert tools.yoga.therapy_tools_id == tools.id
        assert tools.pranayama is None
        assert tools.mudras is None
        assert tools.breathing_exercises is None

    def test_empty_satellites_are_skipped(self, gateway, therapy):
        tools = gateway.create_therapy_tools({
            "therapyId": therapy.id,
            "mantras": "Gayatri",
            "yoga": {"poses": "", "repeatingTimingsPerDay": 0},
            "mudras": {"mudraNames": "   "},
            "pranayama": {"repeatingTimingsPerDay": 3},
        })
        assert tools.mantras == "Gayatri"
        assert tools.yoga is None
        assert tools.mudras is None
        assert tools.pranayama.repeating_timings_per_day == 3

    def test_negative_count_rejected_before_any_write(self, gateway, therapy):
        with pytest.raises(ValidationError):
            gateway.create_therapy_tools({
                "therapyId": therapy.id,
                "breathingExercises": {"exercises": "Box breathing", "repeatingTimingsPerDay": -1},
            })
        assert gateway.list_therapy_tools(therapy.id) == []

    @pytest.mark.parametrize("kind,field", [
        ("yoga", "poses"),
        ("pranayama", "techniques"),
        ("mudras", "mudra_names"),
        ("breathing_exercises", "exercises"),
    ])
    def test_negative_count_rejected_for_every_satellite(self, gateway, therapy, kind, field):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id})
        with pytest.raises(ValidationError):
            gateway.create_satellite(kind, {"therapyToolsId": tools.id, field: "x", "repeatingTimingsPerDay": -1})

    def test_one_tools_record_per_therapy(self, gateway, therapy):
        gateway.create_therapy_tools({"therapyId": therapy.id})
        with pytest.raises(ValidationError):
            gateway.create_therapy_tools({"therapyId": therapy.id})

    def test_create_for_unknown_therapy(self, gateway):
        with pytest.raises(NotFoundError):
            gateway.create_therapy_tools({"therapyId": 42, "yoga": {"poses": "x"}})

    def test_failed_satellite_rolls_back_tools_row(self, gateway, therapy, monkeypatch):
        from therapy_records.services import record_gateway as module

        real_insert = module.RecordGateway._insert
        calls = {"n": 0}

        def failing_insert(db, model, values):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("disk full")
            return real_insert(db, model, values)

        monkeypatch.setattr(module.RecordGateway, "_insert", staticmethod(failing_insert))
        with pytest.raises(RuntimeError):
            gateway.create_therapy_tools({"therapyId": therapy.id, "yoga": {"poses": "x"}})
        monkeypatch.undo()
        assert gateway.list_therapy_tools(therapy.id) == []

    def test_update_returns_untouched_existing_satellites(self, gateway, therapy):
        tools = gateway.create_therapy_tools({
            "therapyId": therapy.id,
            "yoga": {"poses": "Tadasana"},
            "mudras": {"mudraNames": "Gyan mudra"},
        })
        updated = gateway.update_therapy_tools(tools.id, {
            "bandhas": "Mula bandha",
            "yoga": {"id": tools.yoga.id, "poses": "Tadasana, Trikonasana", "repeatingTimingsPerDay": 2},
            "pranayama": {"techniques": "Bhramari"},
        })
        assert updated.bandhas == "Mula bandha"
        assert updated.yoga.id == tools.yoga.id
        assert updated.yoga.poses == "Tadasana, Trikonasana"
        assert updated.yoga.repeating_timings_per_day == 2
        assert updated.pranayama.techniques == "Bhramari"
        # not mentioned in the payload, still part of the composite
        assert updated.mudras.mudra_names == "Gyan mudra"
        assert updated.breathing_exercises is None

    def test_update_rejects_satellite_of_other_tools(self, gateway, disease, therapy):
        other_therapy = gateway.create_therapy({"diseaseId": disease.id, "name": "Other"})
        mine = gateway.create_therapy_tools({"therapyId": therapy.id})
        theirs = gateway.create_therapy_tools({"therapyId": other_therapy.id, "yoga": {"poses": "x"}})
        with pytest.raises(ValidationError):
            gateway.update_therapy_tools(mine.id, {"yoga": {"id": theirs.yoga.id, "poses": "y"}})

    def test_update_unknown_satellite_id(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id})
        with pytest.raises(NotFoundError):
            gateway.update_therapy_tools(tools.id, {"yoga": {"id": 555, "poses": "y"}})

    def test_lookup_by_therapy(self, gateway, therapy):
        with pytest.raises(NotFoundError):
            gateway.get_therapy_tools_by_therapy(therapy.id)
        tools = gateway.create_therapy_tools({"therapyId": therapy.id, "mudras": {"mudraNames": "Prana"}})
        found = gateway.get_therapy_tools_by_therapy(therapy.id)
        assert found.id == tools.id
        assert found.mudras.mudra_names == "Prana"

    def test_get_therapy_includes_tools(self, gateway, therapy):
        gateway.create_therapy_tools({"therapyId": therapy.id, "breathingExercises": {"exercises": "4-7-8"}})
        detail = gateway.get_therapy(therapy.id)
        assert detail.therapy_tools.breathing_exercises.exercises == "4-7-8"

    def test_delete_tools(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id})
        gateway.delete_therapy_tools(tools.id)
        with pytest.raises(NotFoundError):
            gateway.get_therapy_tools(tools.id)

    def test_recreated_tools_do_not_pick_up_old_satellites(self, gateway, therapy):
        old = gateway.create_therapy_tools({"therapyId": therapy.id, "yoga": {"poses": "old"}})
        gateway.delete_therapy_tools(old.id)

        fresh = gateway.create_therapy_tools({"therapyId": therapy.id})
        assert fresh.id != old.id
        assert fresh.yoga is None
        # a new yoga entry is not blocked by the one left behind
        yoga = gateway.create_satellite("yoga", {"therapyToolsId": fresh.id, "poses": "new"})
        assert gateway.get_therapy_tools(fresh.id).yoga.id == yoga.id


class TestSatellites:
    def test_crud_cycle(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id})
        created = gateway.create_satellite("pranayama", {"therapyToolsId": tools.id, "techniques": "Kapalbhati"})
        assert gateway.get_satellite("pranayama", created.id).techniques == "Kapalbhati"

        updated = gateway.update_satellite("pranayama", created.id, {"repeatingTimingsPerDay": "4"})
        assert updated.repeating_timings_per_day == 4
        assert updated.techniques == "Kapalbhati"

        assert [s.id for s in gateway.list_satellites("pranayama", tools.id)] == [created.id]
        gateway.delete_satellite("pranayama", created.id)
        assert gateway.list_satellites("pranayama", tools.id) == []

    def test_camel_case_kind_is_accepted(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id})
        created = gateway.create_satellite("breathingExercises", {"therapyToolsId": tools.id, "exercises": "Sama vritti"})
        assert created.exercises == "Sama vritti"

    def test_unknown_kind(self, gateway):
        with pytest.raises(ValidationError):
            gateway.get_satellite("tai-chi", 1)

    def test_requires_therapy_tools_id(self, gateway):
        with pytest.raises(ValidationError):
            gateway.create_satellite("yoga", {"poses": "x"})

    def test_one_satellite_of_a_kind_per_tools(self, gateway, therapy):
        tools = gateway.create_therapy_tools({"therapyId": therapy.id, "yoga": {"poses": "x"}})
        with pytest.raises(ValidationError):
            gateway.create_satellite("yoga", {"therapyToolsId": tools.id, "poses": "y"})
