"""
Named operations.

Maps the channel names the desktop UI invokes (``get-patients``,
``create-therapy-tools``, ...) onto gateway and attachment store calls. Every
operation takes a single argument: an id, a payload object, or
``{"id": ..., "data": {...}}`` for updates.
"""
from typing import Any, Callable, Dict, Tuple

from ..core.errors import NotFoundError, ValidationError
from ..models.therapy import SatelliteKind
from ..schemas import MedicalReportUpload
from .attachment_store import AttachmentStore
from .record_gateway import RecordGateway, parse_payload

Operation = Callable[[Any], Any]


def _id_and_data(arg: Any) -> Tuple[Any, Any]:
    if not isinstance(arg, dict) or "id" not in arg:
        raise ValidationError("Update operations take {id, data}")
    return arg["id"], arg.get("data") or {}


def _crud(prefix: str, get, create, update, delete) -> Dict[str, Operation]:
    return {
        f"get-{prefix}": get,
        f"create-{prefix}": create,
        f"update-{prefix}": lambda arg: update(*_id_and_data(arg)),
        f"delete-{prefix}": delete,
    }


def build_operations(gateway: RecordGateway, attachments: AttachmentStore) -> Dict[str, Operation]:
    ops: Dict[str, Operation] = {}

    ops["get-patients"] = lambda _arg=None: gateway.list_patients()
    ops.update(_crud(
        "patient", gateway.get_patient, gateway.create_patient,
        gateway.update_patient, gateway.delete_patient,
    ))

    ops["get-diseases-by-patient"] = gateway.list_diseases
    ops.update(_crud(
        "disease", gateway.get_disease, gateway.create_disease,
        gateway.update_disease, gateway.delete_disease,
    ))

    ops["get-medical-histories-by-disease"] = gateway.list_medical_histories
    ops.update(_crud(
        "medical-history", gateway.get_medical_history, gateway.create_medical_history,
        gateway.update_medical_history, gateway.delete_medical_history,
    ))

    ops["get-therapies-by-disease"] = gateway.list_therapies
    ops.update(_crud(
        "therapy", gateway.get_therapy, gateway.create_therapy,
        gateway.update_therapy, gateway.delete_therapy,
    ))

    ops["get-therapy-tools-by-therapy"] = gateway.get_therapy_tools_by_therapy
    ops.update(_crud(
        "therapy-tools", gateway.get_therapy_tools, gateway.create_therapy_tools,
        gateway.update_therapy_tools, gateway.delete_therapy_tools,
    ))

    for kind in SatelliteKind.ALL:
        slug = kind.replace("_", "-")
        ops[f"get-{slug}-by-therapy-tools"] = (lambda k: lambda arg: gateway.list_satellites(k, arg))(kind)
        ops.update(_crud(
            slug,
            (lambda k: lambda arg: gateway.get_satellite(k, arg))(kind),
            (lambda k: lambda arg: gateway.create_satellite(k, arg))(kind),
            (lambda k: lambda sid, data: gateway.update_satellite(k, sid, data))(kind),
            (lambda k: lambda arg: gateway.delete_satellite(k, arg))(kind),
        ))

    def upload(arg):
        req = parse_payload(MedicalReportUpload, arg)
        return attachments.upload(req.source_path, req.disease_id, req.medical_history_id)

    ops["choose-medical-report"] = lambda _arg=None: attachments.choose_file()
    ops["upload-medical-report"] = upload
    ops["get-medical-reports-by-disease"] = attachments.list_by_disease
    ops["get-medical-reports-by-medical-history"] = attachments.list_by_medical_history
    ops["open-medical-report"] = attachments.open
    ops["delete-medical-report"] = attachments.delete
    return ops


class OperationDispatcher:
    """Looks up a named operation and invokes it with its single argument."""

    def __init__(self, gateway: RecordGateway, attachments: AttachmentStore):
        self.operations = build_operations(gateway, attachments)

    @property
    def names(self):
        return sorted(self.operations)

    def invoke(self, name: str, arg: Any = None) -> Any:
        operation = self.operations.get(name)
        if operation is None:
            raise NotFoundError(f"Unknown operation {name!r}")
        return operation(arg)
