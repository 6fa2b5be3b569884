"""
Record store gateway.

One method per (entity, verb) pair. Payloads arrive as UI-shaped mappings (or
the typed view models from ``schemas``), are validated into input models,
mapped onto storage rows, and every result is returned as a typed read model.
Each call runs in a single store transaction, so the composite writes
(therapy tools with their satellites, patient and disease cascades) either
complete as a whole or leave nothing behind.
"""
import logging
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, selectinload

from ..core.database import RecordStore
from ..core.errors import NotFoundError, ValidationError
from ..models.patient import Patient
from ..models.disease import Disease, MedicalHistory
from ..models.therapy import Therapy, TherapyTools, SatelliteKind
from .. import schemas
from ..schemas import row_values

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
Payload = Union[Mapping[str, Any], BaseModel, None]

_SATELLITE_ALIASES = {
    "breathingexercises": SatelliteKind.BREATHING_EXERCISES,
    "breathing-exercises": SatelliteKind.BREATHING_EXERCISES,
    "breathing_exercises": SatelliteKind.BREATHING_EXERCISES,
    "mudra": SatelliteKind.MUDRAS,
}


def coerce_id(value: Any, field: str = "id") -> int:
    """Identifiers arrive as ints or numeric strings from the UI."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} is required and must be an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer, got {value!r}")


def satellite_kind(kind: str) -> str:
    key = str(kind).strip()
    key = _SATELLITE_ALIASES.get(key.lower(), key)
    if key not in SatelliteKind.ALL:
        raise ValidationError(f"Unknown therapy tool kind {kind!r}. Choose from: {SatelliteKind.ALL}")
    return key


def parse_payload(schema_cls: Type[SchemaT], payload: Payload) -> SchemaT:
    """Validate a UI payload into ``schema_cls``, raising ``ValidationError``."""
    if isinstance(payload, schema_cls):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Expected an object payload, got {type(payload).__name__}")
    try:
        return schema_cls.model_validate(dict(payload))
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid {schema_cls.__name__}: {problems}") from exc


def _has_content(satellite: schemas.SatelliteFields, model) -> bool:
    description = getattr(satellite, model.DESCRIPTION_FIELD, None)
    if description and description.strip():
        return True
    count = satellite.repeating_timings_per_day
    return bool(count and count > 0)


def _tools_loaders(*path):
    """selectinload chains that pull a TherapyTools row together with its satellites."""
    loaders = []
    for kind in SatelliteKind.ALL:
        loader = None
        for attr in path + (getattr(TherapyTools, kind),):
            loader = selectinload(attr) if loader is None else loader.selectinload(attr)
        loaders.append(loader)
    return loaders


class RecordGateway:
    def __init__(self, store: RecordStore):
        self.store = store

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get_or_404(db: Session, model, record_id: Any, label: str, options=()):
        pk = coerce_id(record_id, f"{label} id")
        row = db.query(model).options(*options).filter(model.id == pk).first()
        if not row:
            raise NotFoundError(f"{label} {pk} not found")
        return row

    @staticmethod
    def _require_parent(db: Session, model, parent_id: int, label: str) -> None:
        if not db.query(model.id).filter(model.id == parent_id).first():
            raise NotFoundError(f"{label} {parent_id} not found")

    @staticmethod
    def _check_parent_unchanged(row, field: str, requested: Optional[int]) -> None:
        if requested is not None and requested != getattr(row, field):
            raise ValidationError(f"{field} cannot be reassigned ({getattr(row, field)} -> {requested})")

    @staticmethod
    def _insert(db: Session, model, values: dict):
        row = model(**values)
        db.add(row)
        db.flush()
        return row

    @staticmethod
    def _apply(db: Session, row, values: dict):
        for key, value in values.items():
            setattr(row, key, value)
        db.flush()
        return row

    @staticmethod
    def _create_values(payload: BaseModel, model) -> dict:
        # Unsupplied optional fields fall back to column defaults.
        return {k: v for k, v in row_values(payload, model).items() if v is not None}

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def list_patients(self) -> List[schemas.PatientRead]:
        with self.store.transaction() as db:
            rows = db.query(Patient).order_by(Patient.id).all()
            return [schemas.PatientRead.model_validate(r) for r in rows]

    def get_patient(self, patient_id: Any) -> schemas.PatientDetail:
        with self.store.transaction() as db:
            patient = self._get_or_404(
                db, Patient, patient_id, "Patient", options=[selectinload(Patient.diseases)]
            )
            return schemas.PatientDetail.model_validate(patient)

    def create_patient(self, payload: Payload) -> schemas.PatientRead:
        data = parse_payload(schemas.PatientCreate, payload)
        with self.store.transaction() as db:
            patient = self._insert(db, Patient, self._create_values(data, Patient))
            return schemas.PatientRead.model_validate(patient)

    def update_patient(self, patient_id: Any, payload: Payload) -> schemas.PatientRead:
        data = parse_payload(schemas.PatientUpdate, payload)
        values = row_values(data, Patient, partial=True)
        if values.get("registration_date", True) is None:
            values.pop("registration_date")
        with self.store.transaction() as db:
            patient = self._get_or_404(db, Patient, patient_id, "Patient")
            self._apply(db, patient, values)
            return schemas.PatientRead.model_validate(patient)

    def delete_patient(self, patient_id: Any) -> schemas.PatientRead:
        """Delete a patient with its diseases and their medical histories."""
        with self.store.transaction() as db:
            patient = self._get_or_404(db, Patient, patient_id, "Patient")
            result = schemas.PatientRead.model_validate(patient)

            disease_ids = [row.id for row in db.query(Disease.id).filter(Disease.patient_id == patient.id)]
            if disease_ids:
                histories = (
                    db.query(MedicalHistory)
                    .filter(MedicalHistory.disease_id.in_(disease_ids))
                    .delete(synchronize_session=False)
                )
                retained = db.query(Therapy).filter(Therapy.disease_id.in_(disease_ids)).count()
                if retained:
                    logger.warning(
                        "Deleting patient %s leaves %d therapies of its diseases in place",
                        patient.id, retained,
                    )
                db.query(Disease).filter(Disease.patient_id == patient.id).delete(synchronize_session=False)
                logger.info(
                    "Cascade for patient %s: %d diseases, %d medical histories",
                    patient.id, len(disease_ids), histories,
                )
            db.query(Patient).filter(Patient.id == patient.id).delete(synchronize_session=False)
            return result

    # ------------------------------------------------------------------
    # Diseases
    # ------------------------------------------------------------------

    def list_diseases(self, patient_id: Any) -> List[schemas.DiseaseRead]:
        pk = coerce_id(patient_id, "patientId")
        with self.store.transaction() as db:
            rows = db.query(Disease).filter(Disease.patient_id == pk).order_by(Disease.id).all()
            return [schemas.DiseaseRead.model_validate(r) for r in rows]

    def get_disease(self, disease_id: Any) -> schemas.DiseaseDetail:
        """Disease with its medical history, therapies, therapy tools and satellites."""
        options = [
            selectinload(Disease.medical_history),
            selectinload(Disease.therapies).selectinload(Therapy.therapy_tools),
        ] + _tools_loaders(Disease.therapies, Therapy.therapy_tools)
        with self.store.transaction() as db:
            disease = self._get_or_404(db, Disease, disease_id, "Disease", options=options)
            return schemas.DiseaseDetail.model_validate(disease)

    def create_disease(self, payload: Payload) -> schemas.DiseaseRead:
        data = parse_payload(schemas.DiseaseCreate, payload)
        with self.store.transaction() as db:
            self._require_parent(db, Patient, data.patient_id, "Patient")
            disease = self._insert(db, Disease, self._create_values(data, Disease))
            return schemas.DiseaseRead.model_validate(disease)

    def update_disease(self, disease_id: Any, payload: Payload) -> schemas.DiseaseRead:
        data = parse_payload(schemas.DiseaseUpdate, payload)
        values = row_values(data, Disease, partial=True)
        values.pop("patient_id", None)
        with self.store.transaction() as db:
            disease = self._get_or_404(db, Disease, disease_id, "Disease")
            self._check_parent_unchanged(disease, "patient_id", data.patient_id)
            self._apply(db, disease, values)
            return schemas.DiseaseRead.model_validate(disease)

    def delete_disease(self, disease_id: Any) -> schemas.DiseaseRead:
        """Delete a disease and its medical history. Therapies are left in place."""
        with self.store.transaction() as db:
            disease = self._get_or_404(db, Disease, disease_id, "Disease")
            result = schemas.DiseaseRead.model_validate(disease)

            db.query(MedicalHistory).filter(MedicalHistory.disease_id == disease.id).delete(
                synchronize_session=False
            )
            # TODO: product decision pending on whether therapies follow their disease
            retained = db.query(Therapy).filter(Therapy.disease_id == disease.id).count()
            if retained:
                logger.warning("Disease %s deleted with %d therapies retained", disease.id, retained)
            db.query(Disease).filter(Disease.id == disease.id).delete(synchronize_session=False)
            return result

    # ------------------------------------------------------------------
    # Medical history
    # ------------------------------------------------------------------

    def list_medical_histories(self, disease_id: Any) -> List[schemas.MedicalHistoryRead]:
        pk = coerce_id(disease_id, "diseaseId")
        with self.store.transaction() as db:
            rows = db.query(MedicalHistory).filter(MedicalHistory.disease_id == pk).all()
            return [schemas.MedicalHistoryRead.model_validate(r) for r in rows]

    def get_medical_history(self, history_id: Any) -> schemas.MedicalHistoryRead:
        with self.store.transaction() as db:
            history = self._get_or_404(db, MedicalHistory, history_id, "Medical history")
            return schemas.MedicalHistoryRead.model_validate(history)

    def create_medical_history(self, payload: Payload) -> schemas.MedicalHistoryRead:
        data = parse_payload(schemas.MedicalHistoryCreate, payload)
        with self.store.transaction() as db:
            self._require_parent(db, Disease, data.disease_id, "Disease")
            if db.query(MedicalHistory.id).filter(MedicalHistory.disease_id == data.disease_id).first():
                raise ValidationError(f"Disease {data.disease_id} already has a medical history")
            history = self._insert(db, MedicalHistory, self._create_values(data, MedicalHistory))
            return schemas.MedicalHistoryRead.model_validate(history)

    def update_medical_history(self, history_id: Any, payload: Payload) -> schemas.MedicalHistoryRead:
        data = parse_payload(schemas.MedicalHistoryUpdate, payload)
        values = row_values(data, MedicalHistory, partial=True)
        values.pop("disease_id", None)
        with self.store.transaction() as db:
            history = self._get_or_404(db, MedicalHistory, history_id, "Medical history")
            self._check_parent_unchanged(history, "disease_id", data.disease_id)
            self._apply(db, history, values)
            return schemas.MedicalHistoryRead.model_validate(history)

    def delete_medical_history(self, history_id: Any) -> schemas.MedicalHistoryRead:
        with self.store.transaction() as db:
            history = self._get_or_404(db, MedicalHistory, history_id, "Medical history")
            result = schemas.MedicalHistoryRead.model_validate(history)
            db.delete(history)
            return result

    # ------------------------------------------------------------------
    # Therapies
    # ------------------------------------------------------------------

    def list_therapies(self, disease_id: Any) -> List[schemas.TherapyRead]:
        pk = coerce_id(disease_id, "diseaseId")
        with self.store.transaction() as db:
            rows = db.query(Therapy).filter(Therapy.disease_id == pk).order_by(Therapy.id).all()
            return [schemas.TherapyRead.model_validate(r) for r in rows]

    def get_therapy(self, therapy_id: Any) -> schemas.TherapyDetail:
        options = [selectinload(Therapy.therapy_tools)] + _tools_loaders(Therapy.therapy_tools)
        with self.store.transaction() as db:
            therapy = self._get_or_404(db, Therapy, therapy_id, "Therapy", options=options)
            return schemas.TherapyDetail.model_validate(therapy)

    def create_therapy(self, payload: Payload) -> schemas.TherapyRead:
        data = parse_payload(schemas.TherapyCreate, payload)
        with self.store.transaction() as db:
            self._require_parent(db, Disease, data.disease_id, "Disease")
            therapy = self._insert(db, Therapy, self._create_values(data, Therapy))
            return schemas.TherapyRead.model_validate(therapy)

    def update_therapy(self, therapy_id: Any, payload: Payload) -> schemas.TherapyRead:
        data = parse_payload(schemas.TherapyUpdate, payload)
        values = row_values(data, Therapy, partial=True)
        values.pop("disease_id", None)
        with self.store.transaction() as db:
            therapy = self._get_or_404(db, Therapy, therapy_id, "Therapy")
            self._check_parent_unchanged(therapy, "disease_id", data.disease_id)
            self._apply(db, therapy, values)
            return schemas.TherapyRead.model_validate(therapy)

    def delete_therapy(self, therapy_id: Any) -> schemas.TherapyRead:
        with self.store.transaction() as db:
            therapy = self._get_or_404(db, Therapy, therapy_id, "Therapy")
            result = schemas.TherapyRead.model_validate(therapy)
            db.delete(therapy)
            return result

    # ------------------------------------------------------------------
    # Therapy tools (composite with satellites)
    # ------------------------------------------------------------------

    def _load_tools(self, db: Session, tools_id: int) -> schemas.TherapyToolsRead:
        db.expire_all()
        tools = self._get_or_404(db, TherapyTools, tools_id, "Therapy tools", options=_tools_loaders())
        return schemas.TherapyToolsRead.model_validate(tools)

    def list_therapy_tools(self, therapy_id: Any) -> List[schemas.TherapyToolsRead]:
        pk = coerce_id(therapy_id, "therapyId")
        with self.store.transaction() as db:
            rows = (
                db.query(TherapyTools)
                .options(*_tools_loaders())
                .filter(TherapyTools.therapy_id == pk)
                .all()
            )
            return [schemas.TherapyToolsRead.model_validate(r) for r in rows]

    def get_therapy_tools(self, tools_id: Any) -> schemas.TherapyToolsRead:
        with self.store.transaction() as db:
            tools = self._get_or_404(db, TherapyTools, tools_id, "Therapy tools", options=_tools_loaders())
            return schemas.TherapyToolsRead.model_validate(tools)

    def get_therapy_tools_by_therapy(self, therapy_id: Any) -> schemas.TherapyToolsRead:
        pk = coerce_id(therapy_id, "therapyId")
        with self.store.transaction() as db:
            tools = (
                db.query(TherapyTools)
                .options(*_tools_loaders())
                .filter(TherapyTools.therapy_id == pk)
                .first()
            )
            if not tools:
                raise NotFoundError(f"Therapy {pk} has no therapy tools")
            return schemas.TherapyToolsRead.model_validate(tools)

    def create_therapy_tools(self, payload: Payload) -> schemas.TherapyToolsRead:
        """Create the tools row, then each satellite that carries content."""
        data = parse_payload(schemas.TherapyToolsCreate, payload)
        with self.store.transaction() as db:
            self._require_parent(db, Therapy, data.therapy_id, "Therapy")
            if db.query(TherapyTools.id).filter(TherapyTools.therapy_id == data.therapy_id).first():
                raise ValidationError(f"Therapy {data.therapy_id} already has therapy tools")

            tools = self._insert(db, TherapyTools, self._create_values(data, TherapyTools))
            created = []
            for kind in SatelliteKind.ALL:
                satellite = getattr(data, kind)
                model = SatelliteKind.MODELS[kind]
                if satellite is None or not _has_content(satellite, model):
                    continue
                values = self._create_values(satellite, model)
                values["therapy_tools_id"] = tools.id
                self._insert(db, model, values)
                created.append(kind)

            logger.info(
                "Therapy tools %s created for therapy %s with %s",
                tools.id, tools.therapy_id, ", ".join(created) or "no satellites",
            )
            return self._load_tools(db, tools.id)

    def update_therapy_tools(self, tools_id: Any, payload: Payload) -> schemas.TherapyToolsRead:
        """Update scalar fields and upsert satellites.

        A satellite carrying an id is updated in place; one without an id but
        with content is created; anything else is left untouched. The result is
        re-read, so satellites not mentioned in the payload are still returned.
        """
        data = parse_payload(schemas.TherapyToolsUpdate, payload)
        values = row_values(data, TherapyTools, partial=True)
        values.pop("therapy_id", None)
        with self.store.transaction() as db:
            tools = self._get_or_404(db, TherapyTools, tools_id, "Therapy tools")
            self._check_parent_unchanged(tools, "therapy_id", data.therapy_id)
            self._apply(db, tools, values)

            for kind in SatelliteKind.ALL:
                satellite = getattr(data, kind)
                if satellite is None:
                    continue
                model = SatelliteKind.MODELS[kind]
                if satellite.id is not None:
                    row = self._get_or_404(db, model, satellite.id, kind)
                    if row.therapy_tools_id != tools.id:
                        raise ValidationError(f"{kind} {row.id} belongs to therapy tools {row.therapy_tools_id}")
                    changes = row_values(satellite, model, partial=True)
                    changes.pop("therapy_tools_id", None)
                    self._apply(db, row, changes)
                elif _has_content(satellite, model):
                    self._ensure_no_satellite(db, model, kind, tools.id)
                    values = self._create_values(satellite, model)
                    values["therapy_tools_id"] = tools.id
                    self._insert(db, model, values)

            return self._load_tools(db, tools.id)

    def delete_therapy_tools(self, tools_id: Any) -> schemas.TherapyToolsRead:
        with self.store.transaction() as db:
            tools = self._get_or_404(db, TherapyTools, tools_id, "Therapy tools", options=_tools_loaders())
            result = schemas.TherapyToolsRead.model_validate(tools)
            db.query(TherapyTools).filter(TherapyTools.id == tools.id).delete(synchronize_session=False)
            return result

    # ------------------------------------------------------------------
    # Satellites: yoga, pranayama, mudras, breathing exercises
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_no_satellite(db: Session, model, kind: str, tools_id: int) -> None:
        if db.query(model.id).filter(model.therapy_tools_id == tools_id).first():
            raise ValidationError(f"Therapy tools {tools_id} already has {kind}")

    def list_satellites(self, kind: str, tools_id: Any) -> List[schemas.SatelliteFields]:
        kind = satellite_kind(kind)
        model, read = SatelliteKind.MODELS[kind], schemas.SATELLITE_READS[kind]
        pk = coerce_id(tools_id, "therapyToolsId")
        with self.store.transaction() as db:
            rows = db.query(model).filter(model.therapy_tools_id == pk).all()
            return [read.model_validate(r) for r in rows]

    def get_satellite(self, kind: str, satellite_id: Any) -> schemas.SatelliteFields:
        kind = satellite_kind(kind)
        with self.store.transaction() as db:
            row = self._get_or_404(db, SatelliteKind.MODELS[kind], satellite_id, kind)
            return schemas.SATELLITE_READS[kind].model_validate(row)

    def create_satellite(self, kind: str, payload: Payload) -> schemas.SatelliteFields:
        kind = satellite_kind(kind)
        model = SatelliteKind.MODELS[kind]
        data = parse_payload(schemas.SATELLITE_INPUTS[kind], payload)
        if data.therapy_tools_id is None:
            raise ValidationError("therapyToolsId is required")
        with self.store.transaction() as db:
            self._require_parent(db, TherapyTools, data.therapy_tools_id, "Therapy tools")
            self._ensure_no_satellite(db, model, kind, data.therapy_tools_id)
            row = self._insert(db, model, self._create_values(data, model))
            return schemas.SATELLITE_READS[kind].model_validate(row)

    def update_satellite(self, kind: str, satellite_id: Any, payload: Payload) -> schemas.SatelliteFields:
        kind = satellite_kind(kind)
        model = SatelliteKind.MODELS[kind]
        data = parse_payload(schemas.SATELLITE_INPUTS[kind], payload)
        values = row_values(data, model, partial=True)
        values.pop("therapy_tools_id", None)
        with self.store.transaction() as db:
            row = self._get_or_404(db, model, satellite_id, kind)
            self._check_parent_unchanged(row, "therapy_tools_id", data.therapy_tools_id)
            self._apply(db, row, values)
            return schemas.SATELLITE_READS[kind].model_validate(row)

    def delete_satellite(self, kind: str, satellite_id: Any) -> schemas.SatelliteFields:
        kind = satellite_kind(kind)
        with self.store.transaction() as db:
            row = self._get_or_404(db, SatelliteKind.MODELS[kind], satellite_id, kind)
            result = schemas.SATELLITE_READS[kind].model_validate(row)
            db.delete(row)
            return result
