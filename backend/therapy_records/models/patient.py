from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, Text, DateTime
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Patient(Base, TimestampMixin):
    __tablename__ = "patients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    registration_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)
    place_of_residence = Column(String(200), nullable=True)
    reference_person = Column(String(200), nullable=True)
    nature_of_work = Column(String(200), nullable=True)

    # Body measurements: height in cm, weight in kg. BMI is supplied by the caller.
    height = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    bmi = Column(Float, nullable=True)

    sleep_patterns = Column(Text, nullable=True)
    diet = Column(Text, nullable=True)

    # Deletes are issued explicitly by the gateway; the ORM must not null out children.
    diseases = relationship(
        "Disease", back_populates="patient", order_by="Disease.id", passive_deletes="all"
    )
