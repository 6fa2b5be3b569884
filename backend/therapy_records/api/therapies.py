"""Therapy, therapy tools and satellite (yoga, pranayama, mudras, breathing) endpoints."""
from fastapi import APIRouter, Body, Depends, status
from typing import Any, Dict

from ..schemas import (
    TherapyCreate,
    TherapyUpdate,
    TherapyRead,
    TherapyDetail,
    TherapyToolsCreate,
    TherapyToolsUpdate,
    TherapyToolsRead,
)
from ..services.record_gateway import RecordGateway
from .deps import get_gateway

router = APIRouter(prefix="/therapies", tags=["therapies"])
tools_router = APIRouter(prefix="/therapy-tools", tags=["therapy-tools"])
satellites_router = APIRouter(prefix="/satellites", tags=["therapy-tools"])


@router.post("/", response_model=TherapyRead, status_code=status.HTTP_201_CREATED)
def create_therapy(therapy_in: TherapyCreate, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.create_therapy(therapy_in)


@router.get("/{therapy_id}", response_model=TherapyDetail)
def get_therapy(therapy_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.get_therapy(therapy_id)


@router.get("/{therapy_id}/therapy-tools", response_model=TherapyToolsRead)
def get_therapy_tools_by_therapy(therapy_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.get_therapy_tools_by_therapy(therapy_id)


@router.patch("/{therapy_id}", response_model=TherapyRead)
def update_therapy(therapy_id: int, therapy_in: TherapyUpdate, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.update_therapy(therapy_id, therapy_in)


@router.delete("/{therapy_id}", response_model=TherapyRead)
def delete_therapy(therapy_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.delete_therapy(therapy_id)


@tools_router.post("/", response_model=TherapyToolsRead, status_code=status.HTTP_201_CREATED)
def create_therapy_tools(tools_in: TherapyToolsCreate, gateway: RecordGateway = Depends(get_gateway)):
    """Creates the tools record and any satellites that carry content, in one transaction."""
    return gateway.create_therapy_tools(tools_in)


@tools_router.get("/{tools_id}", response_model=TherapyToolsRead)
def get_therapy_tools(tools_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.get_therapy_tools(tools_id)


@tools_router.patch("/{tools_id}", response_model=TherapyToolsRead)
def update_therapy_tools(
    tools_id: int,
    tools_in: TherapyToolsUpdate,
    gateway: RecordGateway = Depends(get_gateway),
):
    return gateway.update_therapy_tools(tools_id, tools_in)


@tools_router.delete("/{tools_id}", response_model=TherapyToolsRead)
def delete_therapy_tools(tools_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.delete_therapy_tools(tools_id)


# Satellite payloads differ per kind, so bodies are validated by the gateway.

@satellites_router.get("/{kind}/by-tools/{tools_id}")
def list_satellites(kind: str, tools_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_satellites(kind, tools_id)


@satellites_router.post("/{kind}", status_code=status.HTTP_201_CREATED)
def create_satellite(
    kind: str,
    payload: Dict[str, Any] = Body(...),
    gateway: RecordGateway = Depends(get_gateway),
):
    return gateway.create_satellite(kind, payload)


@satellites_router.get("/{kind}/{satellite_id}")
def get_satellite(kind: str, satellite_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.get_satellite(kind, satellite_id)


@satellites_router.patch("/{kind}/{satellite_id}")
def update_satellite(
    kind: str,
    satellite_id: int,
    payload: Dict[str, Any] = Body(...),
    gateway: RecordGateway = Depends(get_gateway),
):
    return gateway.update_satellite(kind, satellite_id, payload)


@satellites_router.delete("/{kind}/{satellite_id}")
def delete_satellite(kind: str, satellite_id: int, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.delete_satellite(kind, satellite_id)
