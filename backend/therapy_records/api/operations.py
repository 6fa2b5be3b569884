"""Named-operation bridge: POST /ops/{name} with {"arg": ...}."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Any

from ..services.operations import OperationDispatcher
from .deps import get_dispatcher

router = APIRouter(prefix="/ops", tags=["operations"])


class OperationRequest(BaseModel):
    arg: Any = None


@router.get("/")
def list_operations(dispatcher: OperationDispatcher = Depends(get_dispatcher)):
    return {"operations": dispatcher.names}


@router.post("/{name}")
def invoke_operation(
    name: str,
    req: OperationRequest,
    dispatcher: OperationDispatcher = Depends(get_dispatcher),
):
    return dispatcher.invoke(name, req.arg)
