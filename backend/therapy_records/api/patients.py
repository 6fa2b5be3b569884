from fastapi import APIRouter, Depends, status
from typing import List

from ..schemas import PatientCreate, PatientUpdate, PatientRead, PatientDetail, DiseaseRead
from ..services.measurements import calculate_bmi
from ..services.record_gateway import RecordGateway
from .deps import get_gateway

router = APIRouter(prefix="/patients", tags=["patients"])


def _fill_bmi(patient_in, stored=None) -> None:
    """Compute a missing BMI. On update, a measurement left out of the body comes from ``stored``."""
    if patient_in.bmi is not None:
        return
    height, weight = patient_in.height, patient_in.weight
    if stored is not None:
        sent = patient_in.model_fields_set
        if "height" not in sent and "weight" not in sent:
            return
        if "height" not in sent:
            height = stored.height
        if "weight" not in sent:
            weight = stored.weight
    bmi = calculate_bmi(height, weight)
    if bmi is not None:
        patient_in.bmi = bmi


@router.get("/", response_model=List[PatientRead])
def list_patients(gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_patients()


@router.post("/", response_model=PatientRead, status_code=status.HTTP_201_CREATED)
def create_patient(patient_in: PatientCreate, gateway: RecordGateway = Depends(get_gateway)):
    _fill_bmi(patient_in)
    return gateway.create_patient(patient_in)


@router.get("/{patient_id}", response_model=PatientDetail)
def get_patient(patient_id: int, gateway: RecordGateway = Depends(get_gateway)):
    """Patient with its diseases."""
    return gateway.get_patient(patient_id)


@router.get("/{patient_id}/diseases", response_model=List[DiseaseRead])
def list_patient_diseases(patient_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_diseases(patient_id)


@router.patch("/{patient_id}", response_model=PatientRead)
def update_patient(patient_id: int, patient_in: PatientUpdate, gateway: RecordGateway = Depends(get_gateway)):
    _fill_bmi(patient_in, stored=gateway.get_patient(patient_id))
    return gateway.update_patient(patient_id, patient_in)


@router.delete("/{patient_id}", response_model=PatientRead)
def delete_patient(patient_id: int, gateway: RecordGateway = Depends(get_gateway)):
    """Deletes the patient together with its diseases and their medical histories."""
    return gateway.delete_patient(patient_id)
