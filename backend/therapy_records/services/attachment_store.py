"""
Medical report attachment store.

Files chosen by the user are copied into a managed reports directory under a
timestamp-based name, and a MedicalReport row records where the copy lives and
which disease or medical history it belongs to. The row and the file are kept
in step: a failed insert removes the copy, and a failed unlink keeps the row.
"""
import base64
import logging
import os
import shutil
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from ..core.config import settings
from ..core.database import RecordStore
from ..core.errors import AttachmentIOError, NotFoundError, ValidationError
from ..models.disease import Disease, MedicalHistory
from ..models.medical_report import MedicalReport
from ..schemas import MedicalReportRead, ReportContent
from .record_gateway import coerce_id

logger = logging.getLogger(__name__)

FileChooser = Callable[[str, list], Optional[str]]


def tk_file_chooser(title: str, filetypes: list) -> Optional[str]:
    """Native open-file dialog. Returns None when the user cancels."""
    import tkinter as tk
    from tkinter import filedialog

    root = tk.Tk()
    root.withdraw()
    try:
        path = filedialog.askopenfilename(title=title, filetypes=filetypes)
    finally:
        root.destroy()
    return path or None


class AttachmentStore:
    """Attachments for diseases and medical histories.

    ``reports_dir`` defaults to ``settings.REPORTS_DIR``; ``chooser`` replaces
    the tkinter dialog where no display is available.
    """

    def __init__(
        self,
        store: RecordStore,
        reports_dir: Optional[str] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
        chooser: Optional[FileChooser] = None,
    ):
        self.store = store
        self.reports_dir = os.path.abspath(reports_dir or settings.REPORTS_DIR)
        self.allowed_extensions = [
            ext.lower() for ext in (allowed_extensions or settings.ALLOWED_REPORT_EXTENSIONS)
        ]
        self.chooser = chooser or tk_file_chooser

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def choose_file(self) -> Optional[str]:
        """Ask the user for a report file; None means the dialog was cancelled."""
        patterns = " ".join(f"*{ext}" for ext in self.allowed_extensions)
        path = self.chooser("Select medical report", [("Medical reports", patterns)])
        if not path:
            return None
        return os.path.abspath(path)

    def upload(
        self,
        source_path: str,
        disease_id=None,
        medical_history_id=None,
    ) -> MedicalReportRead:
        """Copy ``source_path`` into the reports directory and record it."""
        file_name = os.path.basename(source_path or "")
        self._check_extension(file_name)
        if not os.path.isfile(source_path):
            raise NotFoundError(f"Source file not found: {source_path}")

        def write(destination: str) -> None:
            shutil.copy2(source_path, destination)

        return self._store(write, file_name, disease_id, medical_history_id)

    def upload_bytes(
        self,
        data: bytes,
        file_name: str,
        disease_id=None,
        medical_history_id=None,
    ) -> MedicalReportRead:
        """Same as ``upload`` for content that arrives in memory."""
        file_name = os.path.basename(file_name or "")
        self._check_extension(file_name)

        def write(destination: str) -> None:
            with open(destination, "wb") as fh:
                fh.write(data)

        return self._store(write, file_name, disease_id, medical_history_id)

    def list_by_disease(self, disease_id) -> List[MedicalReportRead]:
        pk = coerce_id(disease_id, "diseaseId")
        with self.store.transaction() as db:
            rows = db.query(MedicalReport).filter(MedicalReport.disease_id == pk).order_by(MedicalReport.id).all()
            return [MedicalReportRead.model_validate(r) for r in rows]

    def list_by_medical_history(self, medical_history_id) -> List[MedicalReportRead]:
        pk = coerce_id(medical_history_id, "medicalHistoryId")
        with self.store.transaction() as db:
            rows = (
                db.query(MedicalReport)
                .filter(MedicalReport.medical_history_id == pk)
                .order_by(MedicalReport.id)
                .all()
            )
            return [MedicalReportRead.model_validate(r) for r in rows]

    def open(self, path: str) -> ReportContent:
        """Return a stored file base64-encoded with its extension and name."""
        full_path = self._managed_path(path)
        with self.store.transaction() as db:
            report = db.query(MedicalReport).filter(MedicalReport.file_path == full_path).first()
            file_name = report.file_name if report and report.file_name else os.path.basename(full_path)
        return self._read(full_path, file_name)

    def open_report(self, report_id) -> ReportContent:
        with self.store.transaction() as db:
            report = self._get_or_404(db, report_id)
            full_path, file_name = report.file_path, report.file_name
        return self._read(self._managed_path(full_path), file_name or os.path.basename(full_path))

    def delete(self, report_id) -> MedicalReportRead:
        """Delete the record and its file.

        The file is unlinked before the row delete is committed; if unlinking
        fails the row is kept. A file that is already gone is tolerated.
        """
        with self.store.transaction() as db:
            report = self._get_or_404(db, report_id)
            result = MedicalReportRead.model_validate(report)
            db.delete(report)
            db.flush()
            self._remove_file(report.file_path)
        logger.info("Medical report %s deleted (%s)", result.id, result.file_path)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_extension(self, file_name: str) -> None:
        ext = os.path.splitext(file_name)[1].lower()
        if not file_name or ext not in self.allowed_extensions:
            raise ValidationError(
                f"Unsupported report type {ext or file_name!r}. Allowed: {self.allowed_extensions}"
            )

    def _get_or_404(self, db, report_id) -> MedicalReport:
        pk = coerce_id(report_id, "medical report id")
        report = db.query(MedicalReport).filter(MedicalReport.id == pk).first()
        if not report:
            raise NotFoundError(f"Medical report {pk} not found")
        return report

    def _store(self, write, file_name: str, disease_id, medical_history_id) -> MedicalReportRead:
        disease_pk = coerce_id(disease_id, "diseaseId") if disease_id is not None else None
        history_pk = coerce_id(medical_history_id, "medicalHistoryId") if medical_history_id is not None else None
        if disease_pk is None and history_pk is None:
            raise ValidationError("diseaseId or medicalHistoryId is required")

        destination = None
        try:
            with self.store.transaction() as db:
                if disease_pk is not None and not db.query(Disease.id).filter(Disease.id == disease_pk).first():
                    raise NotFoundError(f"Disease {disease_pk} not found")
                if history_pk is not None and not (
                    db.query(MedicalHistory.id).filter(MedicalHistory.id == history_pk).first()
                ):
                    raise NotFoundError(f"Medical history {history_pk} not found")

                destination = self._destination(file_name)
                try:
                    write(destination)
                except OSError as exc:
                    raise AttachmentIOError(f"Could not store {file_name}: {exc}") from exc

                report = MedicalReport(
                    file_path=destination,
                    disease_id=disease_pk,
                    medical_history_id=history_pk,
                    file_name=file_name,
                    file_type=os.path.splitext(file_name)[1].lower(),
                )
                db.add(report)
                db.flush()
                result = MedicalReportRead.model_validate(report)
        except Exception:
            if destination is not None:
                self._discard(destination)
            raise

        logger.info("Stored medical report %s at %s", result.id, destination)
        return result

    def _destination(self, file_name: str) -> str:
        """Timestamped, collision-free path inside the reports directory."""
        try:
            os.makedirs(self.reports_dir, exist_ok=True)
        except OSError as exc:
            raise AttachmentIOError(f"Could not create reports directory {self.reports_dir}: {exc}") from exc
        ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        stem, ext = os.path.splitext(file_name)
        candidate = os.path.join(self.reports_dir, f"{ts}_{stem}{ext}")
        counter = 1
        while os.path.exists(candidate):
            candidate = os.path.join(self.reports_dir, f"{ts}_{stem}_{counter}{ext}")
            counter += 1
        return candidate

    def _managed_path(self, path: str) -> str:
        if not path:
            raise ValidationError("path is required")
        full_path = os.path.abspath(path)
        if os.path.commonpath([full_path, self.reports_dir]) != self.reports_dir:
            raise ValidationError("Path is outside the reports directory")
        return full_path

    @staticmethod
    def _read(full_path: str, file_name: str) -> ReportContent:
        if not os.path.isfile(full_path):
            raise NotFoundError(f"File not found: {full_path}")
        try:
            with open(full_path, "rb") as fh:
                content = fh.read()
        except OSError as exc:
            raise AttachmentIOError(f"Could not read {full_path}: {exc}") from exc
        return ReportContent(
            data=base64.b64encode(content).decode("ascii"),
            file_type=os.path.splitext(full_path)[1].lower(),
            file_name=file_name,
        )

    @staticmethod
    def _remove_file(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning("Medical report file already removed: %s", path)
        except OSError as exc:
            raise AttachmentIOError(f"Could not remove {path}: {exc}") from exc

    @staticmethod
    def _discard(path: str) -> None:
        if not os.path.exists(path):
            return
        try:
            os.remove(path)
        except OSError:
            logger.exception("Could not clean up %s after a failed upload", path)
