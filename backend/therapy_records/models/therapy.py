from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship, declared_attr
from .base import Base, TimestampMixin


class Therapy(Base, TimestampMixin):
    __tablename__ = "therapies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    disease_id = Column(Integer, ForeignKey("diseases.id"), nullable=False, index=True)

    name = Column(String(200), nullable=True)
    fitness_or_therapy = Column(String(200), nullable=True)
    home_remedies = Column(Text, nullable=True)
    diet_reference = Column(Text, nullable=True)
    lifestyle_modifications = Column(Text, nullable=True)
    secondary_therapy = Column(Text, nullable=True)
    aggravating_poses = Column(Text, nullable=True)
    relieving_poses = Column(Text, nullable=True)
    flexibility_level = Column(String(100), nullable=True)
    nerve_stiffness = Column(String(100), nullable=True)
    muscle_stiffness = Column(String(100), nullable=True)
    avoidable_poses = Column(Text, nullable=True)
    therapy_poses = Column(Text, nullable=True)
    side_effects = Column(Text, nullable=True)
    progressive_report = Column(Text, nullable=True)

    disease = relationship("Disease", back_populates="therapies")
    therapy_tools = relationship(
        "TherapyTools", back_populates="therapy", uselist=False, passive_deletes="all"
    )


class TherapyTools(Base, TimestampMixin):
    __tablename__ = "therapy_tools"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    therapy_id = Column(Integer, ForeignKey("therapies.id"), nullable=False, unique=True, index=True)

    mantras = Column(Text, nullable=True)
    meditation_types = Column(Text, nullable=True)
    bandhas = Column(Text, nullable=True)

    therapy = relationship("Therapy", back_populates="therapy_tools")
    yoga = relationship("Yoga", uselist=False, passive_deletes="all")
    pranayama = relationship("Pranayama", uselist=False, passive_deletes="all")
    mudras = relationship("Mudras", uselist=False, passive_deletes="all")
    breathing_exercises = relationship("BreathingExercises", uselist=False, passive_deletes="all")


class SatelliteMixin(TimestampMixin):
    """One-to-one child of TherapyTools: a description plus an optional daily count."""

    # Name of the free-text column that describes the practice.
    DESCRIPTION_FIELD = ""

    # Row ids are never reused, so rows left behind by a delete stay detached.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    repeating_timings_per_day = Column(Integer, nullable=True)

    @declared_attr
    def therapy_tools_id(cls):
        return Column(Integer, ForeignKey("therapy_tools.id"), nullable=False, unique=True, index=True)


class Yoga(SatelliteMixin, Base):
    __tablename__ = "yoga"
    DESCRIPTION_FIELD = "poses"

    poses = Column(Text, nullable=True)


class Pranayama(SatelliteMixin, Base):
    __tablename__ = "pranayama"
    DESCRIPTION_FIELD = "techniques"

    techniques = Column(Text, nullable=True)


class Mudras(SatelliteMixin, Base):
    __tablename__ = "mudras"
    DESCRIPTION_FIELD = "mudra_names"

    mudra_names = Column(Text, nullable=True)


class BreathingExercises(SatelliteMixin, Base):
    __tablename__ = "breathing_exercises"
    DESCRIPTION_FIELD = "exercises"

    exercises = Column(Text, nullable=True)


class SatelliteKind:
    YOGA = "yoga"
    PRANAYAMA = "pranayama"
    MUDRAS = "mudras"
    BREATHING_EXERCISES = "breathing_exercises"

    ALL = [YOGA, PRANAYAMA, MUDRAS, BREATHING_EXERCISES]

    MODELS = {
        YOGA: Yoga,
        PRANAYAMA: Pranayama,
        MUDRAS: Mudras,
        BREATHING_EXERCISES: BreathingExercises,
    }
