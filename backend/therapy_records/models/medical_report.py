from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base, TimestampMixin


class MedicalReport(Base, TimestampMixin):
    """Metadata for an attachment copied into the managed reports directory.

    References a Disease or a MedicalHistory; rows are not removed when the
    parent is deleted.
    """
    __tablename__ = "medical_reports"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_path = Column(String(1000), nullable=False)  # Absolute path inside REPORTS_DIR
    disease_id = Column(Integer, ForeignKey("diseases.id"), nullable=True, index=True)
    medical_history_id = Column(Integer, ForeignKey("medical_histories.id"), nullable=True, index=True)
    file_name = Column(String(255), nullable=True)  # Original basename as chosen by the user
    file_type = Column(String(20), nullable=True)   # Extension including the dot, e.g. ".pdf"
