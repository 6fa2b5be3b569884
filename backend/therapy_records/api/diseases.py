from fastapi import APIRouter, Depends, status
from typing import List

from ..schemas import (
    DiseaseCreate,
    DiseaseUpdate,
    DiseaseRead,
    DiseaseDetail,
    MedicalHistoryCreate,
    MedicalHistoryUpdate,
    MedicalHistoryRead,
    TherapyRead,
)
from ..services.record_gateway import RecordGateway
from .deps import get_gateway

router = APIRouter(prefix="/diseases", tags=["diseases"])
history_router = APIRouter(prefix="/medical-histories", tags=["medical-histories"])


@router.post("/", response_model=DiseaseRead, status_code=status.HTTP_201_CREATED)
def create_disease(disease_in: DiseaseCreate, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.create_disease(disease_in)


@router.get("/{disease_id}", response_model=DiseaseDetail)
def get_disease(disease_id: int, gateway: RecordGateway = Depends(get_gateway)):
    """Full record graph: medical history, therapies, therapy tools and satellites."""
    return gateway.get_disease(disease_id)


@router.get("/{disease_id}/therapies", response_model=List[TherapyRead])
def list_disease_therapies(disease_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_therapies(disease_id)


@router.get("/{disease_id}/medical-histories", response_model=List[MedicalHistoryRead])
def list_disease_histories(disease_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_medical_histories(disease_id)


@router.patch("/{disease_id}", response_model=DiseaseRead)
def update_disease(disease_id: int, disease_in: DiseaseUpdate, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.update_disease(disease_id, disease_in)


@router.delete("/{disease_id}", response_model=DiseaseRead)
def delete_disease(disease_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.delete_disease(disease_id)


@history_router.post("/", response_model=MedicalHistoryRead, status_code=status.HTTP_201_CREATED)
def create_medical_history(history_in: MedicalHistoryCreate, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.create_medical_history(history_in)


@history_router.get("/{history_id}", response_model=MedicalHistoryRead)
def get_medical_history(history_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.get_medical_history(history_id)


@history_router.patch("/{history_id}", response_model=MedicalHistoryRead)
def update_medical_history(
    history_id: int,
    history_in: MedicalHistoryUpdate,
    gateway: RecordGateway = Depends(get_gateway),
):
    return gateway.update_medical_history(history_id, history_in)


@history_router.delete("/{history_id}", response_model=MedicalHistoryRead)
def delete_medical_history(history_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.delete_medical_history(history_id)
