from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Disease(Base, TimestampMixin):
    __tablename__ = "diseases"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)

    name_of_disease = Column(String(200), nullable=True)
    chief_complaint = Column(Text, nullable=True)
    time_period = Column(String(100), nullable=True)
    onset_of_disease = Column(String(100), nullable=True)
    symptoms = Column(Text, nullable=True)
    location_of_pain = Column(String(200), nullable=True)
    severity = Column(String(50), nullable=True)
    recurrence_timing = Column(String(100), nullable=True)
    aggravating_factors = Column(Text, nullable=True)
    medical_reports = Column(Text, nullable=True)  # free-text notes; files live in MedicalReport
    type_of_disease = Column(String(100), nullable=True)
    anatomical_reference = Column(Text, nullable=True)
    physiological_reference = Column(Text, nullable=True)
    psychological_reference = Column(Text, nullable=True)

    patient = relationship("Patient", back_populates="diseases")
    medical_history = relationship(
        "MedicalHistory", back_populates="disease", uselist=False, passive_deletes="all"
    )
    therapies = relationship(
        "Therapy", back_populates="disease", order_by="Therapy.id", passive_deletes="all"
    )


class MedicalHistory(Base, TimestampMixin):
    __tablename__ = "medical_histories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    disease_id = Column(Integer, ForeignKey("diseases.id"), nullable=False, unique=True, index=True)

    childhood_illness = Column(Text, nullable=True)
    psychiatric_illness = Column(Text, nullable=True)
    occupational_influences = Column(Text, nullable=True)
    operations_or_surgeries = Column(Text, nullable=True)
    hereditary = Column(Boolean, nullable=False, default=False)
    medical_reports = Column(Text, nullable=True)

    disease = relationship("Disease", back_populates="medical_history")
