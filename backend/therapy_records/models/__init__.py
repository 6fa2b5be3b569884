from .base import Base, TimestampMixin
from .patient import Patient
from .disease import Disease, MedicalHistory
from .therapy import (
    Therapy,
    TherapyTools,
    Yoga,
    Pranayama,
    Mudras,
    BreathingExercises,
    SatelliteKind,
)
from .medical_report import MedicalReport

__all__ = [
    "Base",
    "TimestampMixin",
    "Patient",
    "Disease",
    "MedicalHistory",
    "Therapy",
    "TherapyTools",
    "Yoga",
    "Pranayama",
    "Mudras",
    "BreathingExercises",
    "SatelliteKind",
    "MedicalReport",
]
