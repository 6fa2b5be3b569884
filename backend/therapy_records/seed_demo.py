"""
Demo data seeder.

Creates one demo patient with a disease, its medical history, a therapy and a
full set of therapy tools so the UI has something to browse right after a
fresh start.

This seeder is idempotent and safe to call on every startup.
"""
from datetime import datetime

from .core.database import RecordStore
from .models.patient import Patient
from .services.measurements import calculate_bmi
from .services.record_gateway import RecordGateway

DEMO_PATIENT_NAME = "Demo Patient"
DEMO_DISEASE_NAME = "Chronic lower back pain"


def seed_demo_data(store: RecordStore) -> None:
    """Create the demo patient graph if it does not already exist."""
    store.open()
    with store.transaction() as db:
        if db.query(Patient.id).filter(Patient.name == DEMO_PATIENT_NAME).first():
            return

    gateway = RecordGateway(store)
    patient = _seed_patient(gateway)
    disease = _seed_disease(gateway, patient.id)
    _seed_therapy(gateway, disease.id)


# ── helpers ──────────────────────────────────────────────────────────────────

def _seed_patient(gateway: RecordGateway):
    height, weight = 172.0, 68.5
    patient = gateway.create_patient({
        "name": DEMO_PATIENT_NAME,
        "date": datetime(2024, 1, 15, 9, 30),
        "age": 46,
        "gender": "Female",
        "placeOfResidence": "Pune",
        "natureOfWork": "Software engineer (desk job)",
        "height": height,
        "weight": weight,
        "bmi": calculate_bmi(height, weight),
        "sleepPatterns": "6 hours, wakes once at night",
        "diet": "Vegetarian",
    })
    print(f"[seed] Created demo patient: {patient.name} (id: {patient.id})")
    return patient


def _seed_disease(gateway: RecordGateway, patient_id: int):
    disease = gateway.create_disease({
        "patientId": patient_id,
        "nameOfDisease": DEMO_DISEASE_NAME,
        "chiefComplaint": "Dull ache in the lumbar region after long sitting",
        "timePeriod": "8 months",
        "severity": "Moderate",
        "locationOfPain": "Lower back",
    })
    gateway.create_medical_history({
        "diseaseId": disease.id,
        "occupationalInfluences": "Prolonged sitting",
        "hereditary": False,
    })
    print(f"[seed] Created demo disease: {disease.name_of_disease} (id: {disease.id})")
    return disease


def _seed_therapy(gateway: RecordGateway, disease_id: int) -> None:
    therapy = gateway.create_therapy({
        "diseaseId": disease_id,
        "name": "Spine mobility programme",
        "fitnessOrTherapy": "Therapy",
        "relievingPoses": "Cat-cow, child's pose",
        "avoidablePoses": "Deep forward bends",
    })
    tools = gateway.create_therapy_tools({
        "therapyId": therapy.id,
        "mantras": "Om chanting",
        "yoga": {"poses": "Bhujangasana, Makarasana", "repeatingTimingsPerDay": 2},
        "pranayama": {"techniques": "Anulom vilom", "repeatingTimingsPerDay": 1},
        "breathingExercises": {"exercises": "Diaphragmatic breathing", "repeatingTimingsPerDay": 3},
    })
    print(f"[seed] Created demo therapy tools: id {tools.id} for therapy {therapy.id}")
