"""FastAPI dependencies resolving the services attached to the running app."""
from fastapi import Request

from ..services.attachment_store import AttachmentStore
from ..services.operations import OperationDispatcher
from ..services.record_gateway import RecordGateway


def get_gateway(request: Request) -> RecordGateway:
    return request.app.state.gateway


def get_attachments(request: Request) -> AttachmentStore:
    return request.app.state.attachments


def get_dispatcher(request: Request) -> OperationDispatcher:
    return request.app.state.dispatcher
