"""
Typed view models exchanged with the UI.

Input models define exactly which scalar fields may be written for each entity;
relation objects and server-managed timestamps are not declared, so they never
reach a storage row. Read models are built from ORM rows. The wire format is
camelCase; snake_case names are accepted as well.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SERVER_MANAGED_FIELDS = ("id", "created_at", "updated_at")


class Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def row_values(payload: BaseModel, model_cls: Type, partial: bool = False) -> Dict[str, Any]:
    """Translate a view model into column values for ``model_cls``.

    With ``partial`` only fields the caller actually supplied are returned,
    which is what an update writes.
    """
    columns = set(model_cls.__table__.columns.keys()) - set(SERVER_MANAGED_FIELDS)
    data = payload.model_dump(exclude_unset=partial, by_alias=False)
    return {key: value for key, value in data.items() if key in columns}


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ── Patient ─────────────────────────────────────────────────────────────────

class PatientFields(Schema):
    name: Optional[str] = None
    registration_date: Optional[datetime] = Field(default=None, alias="date")
    age: Optional[int] = None
    gender: Optional[str] = None
    place_of_residence: Optional[str] = None
    reference_person: Optional[str] = None
    nature_of_work: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    bmi: Optional[float] = None
    sleep_patterns: Optional[str] = None
    diet: Optional[str] = None

    @field_validator("age", "height", "weight", "bmi", mode="before")
    @classmethod
    def blank_numbers_to_none(cls, value):
        return _blank_to_none(value)


class PatientCreate(PatientFields):
    name: str


class PatientUpdate(PatientFields):
    @field_validator("name")
    @classmethod
    def name_cannot_be_cleared(cls, value):
        if value is None or not value.strip():
            raise ValueError("name cannot be cleared")
        return value


class PatientRead(PatientFields):
    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Disease & medical history ───────────────────────────────────────────────

class DiseaseFields(Schema):
    name_of_disease: Optional[str] = None
    chief_complaint: Optional[str] = None
    time_period: Optional[str] = None
    onset_of_disease: Optional[str] = None
    symptoms: Optional[str] = None
    location_of_pain: Optional[str] = None
    severity: Optional[str] = None
    recurrence_timing: Optional[str] = None
    aggravating_factors: Optional[str] = None
    medical_reports: Optional[str] = None
    type_of_disease: Optional[str] = None
    anatomical_reference: Optional[str] = None
    physiological_reference: Optional[str] = None
    psychological_reference: Optional[str] = None


class DiseaseCreate(DiseaseFields):
    patient_id: int


class DiseaseUpdate(DiseaseFields):
    patient_id: Optional[int] = None


class DiseaseRead(DiseaseFields):
    id: int
    patient_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MedicalHistoryFields(Schema):
    childhood_illness: Optional[str] = None
    psychiatric_illness: Optional[str] = None
    occupational_influences: Optional[str] = None
    operations_or_surgeries: Optional[str] = None
    hereditary: bool = False
    medical_reports: Optional[str] = None


class MedicalHistoryCreate(MedicalHistoryFields):
    disease_id: int


class MedicalHistoryUpdate(MedicalHistoryFields):
    disease_id: Optional[int] = None


class MedicalHistoryRead(MedicalHistoryFields):
    id: int
    disease_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Therapy ─────────────────────────────────────────────────────────────────

class TherapyFields(Schema):
    name: Optional[str] = None
    fitness_or_therapy: Optional[str] = None
    home_remedies: Optional[str] = None
    diet_reference: Optional[str] = None
    lifestyle_modifications: Optional[str] = None
    secondary_therapy: Optional[str] = None
    aggravating_poses: Optional[str] = None
    relieving_poses: Optional[str] = None
    flexibility_level: Optional[str] = None
    nerve_stiffness: Optional[str] = None
    muscle_stiffness: Optional[str] = None
    avoidable_poses: Optional[str] = None
    therapy_poses: Optional[str] = None
    side_effects: Optional[str] = None
    progressive_report: Optional[str] = None


class TherapyCreate(TherapyFields):
    disease_id: int


class TherapyUpdate(TherapyFields):
    disease_id: Optional[int] = None


class TherapyRead(TherapyFields):
    id: int
    disease_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Therapy tool satellites ─────────────────────────────────────────────────

class SatelliteFields(Schema):
    id: Optional[int] = None
    therapy_tools_id: Optional[int] = None
    repeating_timings_per_day: Optional[int] = Field(default=None, ge=0)

    @field_validator("repeating_timings_per_day", "id", "therapy_tools_id", mode="before")
    @classmethod
    def blank_numbers_to_none(cls, value):
        return _blank_to_none(value)


class YogaIn(SatelliteFields):
    poses: Optional[str] = None


class PranayamaIn(SatelliteFields):
    techniques: Optional[str] = None


class MudrasIn(SatelliteFields):
    mudra_names: Optional[str] = None


class BreathingExercisesIn(SatelliteFields):
    exercises: Optional[str] = None


class YogaRead(YogaIn):
    id: int
    therapy_tools_id: int


class PranayamaRead(PranayamaIn):
    id: int
    therapy_tools_id: int


class MudrasRead(MudrasIn):
    id: int
    therapy_tools_id: int


class BreathingExercisesRead(BreathingExercisesIn):
    id: int
    therapy_tools_id: int


SATELLITE_INPUTS: Dict[str, Type[SatelliteFields]] = {
    "yoga": YogaIn,
    "pranayama": PranayamaIn,
    "mudras": MudrasIn,
    "breathing_exercises": BreathingExercisesIn,
}

SATELLITE_READS: Dict[str, Type[SatelliteFields]] = {
    "yoga": YogaRead,
    "pranayama": PranayamaRead,
    "mudras": MudrasRead,
    "breathing_exercises": BreathingExercisesRead,
}


# ── Therapy tools (composite) ───────────────────────────────────────────────

class TherapyToolsFields(Schema):
    mantras: Optional[str] = None
    meditation_types: Optional[str] = None
    bandhas: Optional[str] = None


class TherapyToolsCreate(TherapyToolsFields):
    therapy_id: int
    yoga: Optional[YogaIn] = None
    pranayama: Optional[PranayamaIn] = None
    mudras: Optional[MudrasIn] = None
    breathing_exercises: Optional[BreathingExercisesIn] = None


class TherapyToolsUpdate(TherapyToolsFields):
    therapy_id: Optional[int] = None
    yoga: Optional[YogaIn] = None
    pranayama: Optional[PranayamaIn] = None
    mudras: Optional[MudrasIn] = None
    breathing_exercises: Optional[BreathingExercisesIn] = None


class TherapyToolsRead(TherapyToolsFields):
    id: int
    therapy_id: int
    yoga: Optional[YogaRead] = None
    pranayama: Optional[PranayamaRead] = None
    mudras: Optional[MudrasRead] = None
    breathing_exercises: Optional[BreathingExercisesRead] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Composite reads ─────────────────────────────────────────────────────────

class TherapyDetail(TherapyRead):
    therapy_tools: Optional[TherapyToolsRead] = None


class DiseaseDetail(DiseaseRead):
    medical_history: Optional[MedicalHistoryRead] = None
    therapies: List[TherapyDetail] = []


class PatientDetail(PatientRead):
    diseases: List[DiseaseRead] = []


# ── Medical reports ─────────────────────────────────────────────────────────

class MedicalReportRead(Schema):
    id: int
    file_path: str
    disease_id: Optional[int] = None
    medical_history_id: Optional[int] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    created_at: Optional[datetime] = None


class MedicalReportUpload(Schema):
    source_path: str
    disease_id: Optional[int] = None
    medical_history_id: Optional[int] = None


class ReportContent(Schema):
    data: str  # base64
    file_type: str
    file_name: str
