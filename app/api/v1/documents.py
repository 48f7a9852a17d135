"""Student document API endpoints."""

import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.common import APIResponse
from app.schemas.document import DocumentResponse
from app.services.document_service import get_document_service
from app.utils.permissions import REGISTRAR_ROLES, require_role

router = APIRouter()


@router.post("", response_model=APIResponse[DocumentResponse])
@require_role(*REGISTRAR_ROLES)
async def upload_document(
    student_id: uuid.UUID = Form(...),
    file: UploadFile = File(...),
    notes: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Upload a document to a student's file.

    Accepts images, PDFs and Word documents up to the configured size limit.
    """
    document = await get_document_service().upload_document(db, student_id, file, notes)
    return APIResponse(
        data=DocumentResponse.model_validate(document),
        message="Document uploaded successfully",
    )


@router.get("/{document_id}", response_model=APIResponse[DocumentResponse])
@require_role(*REGISTRAR_ROLES)
async def get_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    document = await get_document_service().get_document(db, document_id)
    return APIResponse(data=DocumentResponse.model_validate(document))


@router.get("/{document_id}/download-url", response_model=APIResponse[dict])
@require_role(*REGISTRAR_ROLES)
async def get_download_url(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Short-lived presigned URL for downloading the stored file."""
    service = get_document_service()
    document = await service.get_document(db, document_id)
    return APIResponse(data={"url": service.generate_presigned_url(document), "expires_in": 3600})


@router.delete("/{document_id}", response_model=APIResponse[None])
@require_role(*REGISTRAR_ROLES)
async def delete_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_document_service().delete_document(db, document_id)
    return APIResponse(message="Document deleted successfully")
