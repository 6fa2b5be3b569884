"""Medical report attachments: upload, list, view, delete."""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import List, Optional

from ..schemas import MedicalReportRead, MedicalReportUpload, ReportContent
from ..services.attachment_store import AttachmentStore
from .deps import get_attachments

router = APIRouter(prefix="/medical-reports", tags=["medical-reports"])


@router.post("/upload", response_model=MedicalReportRead, status_code=status.HTTP_201_CREATED)
def upload_from_path(req: MedicalReportUpload, attachments: AttachmentStore = Depends(get_attachments)):
    """Copy a file that already exists on this machine into the reports directory."""
    return attachments.upload(req.source_path, req.disease_id, req.medical_history_id)


@router.post("/", response_model=MedicalReportRead, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    disease_id: Optional[int] = Form(None),
    medical_history_id: Optional[int] = Form(None),
    attachments: AttachmentStore = Depends(get_attachments),
):
    data = await file.read()
    return attachments.upload_bytes(data, file.filename, disease_id, medical_history_id)


@router.get("/disease/{disease_id}", response_model=List[MedicalReportRead])
def list_by_disease(disease_id: int, attachments: AttachmentStore = Depends(get_attachments)):
    return attachments.list_by_disease(disease_id)


@router.get("/medical-history/{history_id}", response_model=List[MedicalReportRead])
def list_by_medical_history(history_id: int, attachments: AttachmentStore = Depends(get_attachments)):
    return attachments.list_by_medical_history(history_id)


@router.get("/open", response_model=ReportContent)
def open_by_path(path: str, attachments: AttachmentStore = Depends(get_attachments)):
    return attachments.open(path)


@router.get("/{report_id}/content", response_model=ReportContent)
def open_report(report_id: int, attachments: AttachmentStore = Depends(get_attachments)):
    """Base64 content with extension and original file name, ready for a data: URL."""
    return attachments.open_report(report_id)


@router.delete("/{report_id}", response_model=MedicalReportRead)
def delete_report(report_id: int, attachments: AttachmentStore = Depends(get_attachments)):
    return attachments.delete(report_id)
