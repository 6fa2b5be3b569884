"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _satellite(table: str, description: str) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("therapy_tools_id", sa.Integer(), sa.ForeignKey("therapy_tools.id"), nullable=False),
        sa.Column(description, sa.Text(), nullable=True),
        sa.Column("repeating_timings_per_day", sa.Integer(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index(f"ix_{table}_therapy_tools_id", table, ["therapy_tools_id"], unique=True)


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("registration_date", sa.DateTime(), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("place_of_residence", sa.String(200), nullable=True),
        sa.Column("reference_person", sa.String(200), nullable=True),
        sa.Column("nature_of_work", sa.String(200), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("bmi", sa.Float(), nullable=True),
        sa.Column("sleep_patterns", sa.Text(), nullable=True),
        sa.Column("diet", sa.Text(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "diseases",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("name_of_disease", sa.String(200), nullable=True),
        sa.Column("chief_complaint", sa.Text(), nullable=True),
        sa.Column("time_period", sa.String(100), nullable=True),
        sa.Column("onset_of_disease", sa.String(100), nullable=True),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column("location_of_pain", sa.String(200), nullable=True),
        sa.Column("severity", sa.String(50), nullable=True),
        sa.Column("recurrence_timing", sa.String(100), nullable=True),
        sa.Column("aggravating_factors", sa.Text(), nullable=True),
        sa.Column("medical_reports", sa.Text(), nullable=True),
        sa.Column("type_of_disease", sa.String(100), nullable=True),
        sa.Column("anatomical_reference", sa.Text(), nullable=True),
        sa.Column("physiological_reference", sa.Text(), nullable=True),
        sa.Column("psychological_reference", sa.Text(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_diseases_patient_id", "diseases", ["patient_id"])

    op.create_table(
        "medical_histories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("disease_id", sa.Integer(), sa.ForeignKey("diseases.id"), nullable=False),
        sa.Column("childhood_illness", sa.Text(), nullable=True),
        sa.Column("psychiatric_illness", sa.Text(), nullable=True),
        sa.Column("occupational_influences", sa.Text(), nullable=True),
        sa.Column("operations_or_surgeries", sa.Text(), nullable=True),
        sa.Column("hereditary", sa.Boolean(), nullable=False),
        sa.Column("medical_reports", sa.Text(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_medical_histories_disease_id", "medical_histories", ["disease_id"], unique=True)

    op.create_table(
        "therapies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("disease_id", sa.Integer(), sa.ForeignKey("diseases.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("fitness_or_therapy", sa.String(200), nullable=True),
        sa.Column("home_remedies", sa.Text(), nullable=True),
        sa.Column("diet_reference", sa.Text(), nullable=True),
        sa.Column("lifestyle_modifications", sa.Text(), nullable=True),
        sa.Column("secondary_therapy", sa.Text(), nullable=True),
        sa.Column("aggravating_poses", sa.Text(), nullable=True),
        sa.Column("relieving_poses", sa.Text(), nullable=True),
        sa.Column("flexibility_level", sa.String(100), nullable=True),
        sa.Column("nerve_stiffness", sa.String(100), nullable=True),
        sa.Column("muscle_stiffness", sa.String(100), nullable=True),
        sa.Column("avoidable_poses", sa.Text(), nullable=True),
        sa.Column("therapy_poses", sa.Text(), nullable=True),
        sa.Column("side_effects", sa.Text(), nullable=True),
        sa.Column("progressive_report", sa.Text(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_therapies_disease_id", "therapies", ["disease_id"])

    op.create_table(
        "therapy_tools",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("therapy_id", sa.Integer(), sa.ForeignKey("therapies.id"), nullable=False),
        sa.Column("mantras", sa.Text(), nullable=True),
        sa.Column("meditation_types", sa.Text(), nullable=True),
        sa.Column("bandhas", sa.Text(), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_therapy_tools_therapy_id", "therapy_tools", ["therapy_id"], unique=True)

    _satellite("yoga", "poses")
    _satellite("pranayama", "techniques")
    _satellite("mudras", "mudra_names")
    _satellite("breathing_exercises", "exercises")

    op.create_table(
        "medical_reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("file_path", sa.String(1000), nullable=False),
        sa.Column("disease_id", sa.Integer(), sa.ForeignKey("diseases.id"), nullable=True),
        sa.Column("medical_history_id", sa.Integer(), sa.ForeignKey("medical_histories.id"), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("file_type", sa.String(20), nullable=True),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_medical_reports_disease_id", "medical_reports", ["disease_id"])
    op.create_index("ix_medical_reports_medical_history_id", "medical_reports", ["medical_history_id"])


def downgrade() -> None:
    op.drop_table("medical_reports")
    for table in ("breathing_exercises", "mudras", "pranayama", "yoga"):
        op.drop_table(table)
    op.drop_table("therapy_tools")
    op.drop_table("therapies")
    op.drop_table("medical_histories")
    op.drop_table("diseases")
    op.drop_table("patients")
