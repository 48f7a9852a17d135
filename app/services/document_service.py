"""Document service for student document uploads in S3-compatible storage."""

import logging
import mimetypes
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundException, ValidationException
from app.models import Document, StudentRecord
from app.services.realtime_service import get_connection_manager
from app.utils.request_context import get_current_user_id_or_none

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
    "application/pdf",
}

EXTENSION_MIME_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".pdf": "application/pdf",
}


def file_extension(filename: str | None) -> str:
    """File extension including the dot, lowercased."""
    if not filename or "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def guess_content_type(filename: str | None) -> str:
    if not filename:
        return "application/octet-stream"
    return (
        EXTENSION_MIME_MAP.get(file_extension(filename))
        or mimetypes.guess_type(filename)[0]
        or "application/octet-stream"
    )


def storage_key(student_id: uuid.UUID, file_id: uuid.UUID, filename: str | None) -> str:
    """Object key: documents/{student_id}/{uuid}{ext}."""
    return f"documents/{student_id}/{file_id}{file_extension(filename)}"


def public_url(key: str) -> str:
    """URL the document is served from."""
    if settings.s3_public_url:
        return f"{settings.s3_public_url.rstrip('/')}/{key}"
    if settings.s3_endpoint_url:
        return f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket_name}/{key}"
    return f"https://{settings.s3_bucket_name}.s3.{settings.s3_region}.amazonaws.com/{key}"


class DocumentService:
    """Service for student documents and their stored files."""

    def __init__(self):
        self._client = None

    @property
    def s3_client(self):
        """Get or create the S3 client lazily."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.s3_endpoint_url,
                region_name=settings.s3_region,
                aws_access_key_id=settings.s3_access_key_id or None,
                aws_secret_access_key=settings.s3_secret_access_key or None,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path"},
                ),
            )
        return self._client

    async def upload_document(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        file: UploadFile,
        notes: str | None = None,
    ) -> Document:
        """Upload a file to object storage and create its document row.

        Args:
            db: Database session
            student_id: Owning student record
            file: Uploaded file from FastAPI
            notes: Optional free-text notes

        Returns:
            Created Document
        """
        if not await db.get(StudentRecord, student_id):
            raise NotFoundException("Student")
        if not file.filename:
            raise ValidationException([{"field": "file", "message": "File name is required"}])

        content_type = file.content_type or guess_content_type(file.filename)
        if content_type not in ALLOWED_MIME_TYPES:
            raise ValidationException([{
                "field": "file",
                "message": f"File type '{content_type}' is not allowed",
            }])

        content = await file.read()
        if len(content) > settings.max_upload_size_bytes:
            raise ValidationException([{
                "field": "file",
                "message": f"File size exceeds maximum allowed ({settings.max_upload_size_mb}MB)",
            }])

        key = storage_key(student_id, uuid.uuid4(), file.filename)
        try:
            self.s3_client.put_object(
                Bucket=settings.s3_bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except ClientError as e:
            logger.error(f"Upload of {file.filename} failed: {e}")
            raise ValidationException([{"field": "file", "message": f"Failed to upload file: {e}"}])

        document = Document(
            student_id=student_id,
            file_name=file.filename,
            file_size=len(content),
            mime_type=content_type,
            s3_key=key,
            s3_url=public_url(key),
            notes=notes,
            uploaded_by=get_current_user_id_or_none(),
        )
        db.add(document)
        await db.commit()
        await db.refresh(document)

        await get_connection_manager().notify_change("documents", "insert", document.id)
        return document

    async def get_document(self, db: AsyncSession, document_id: uuid.UUID) -> Document:
        document = await db.get(Document, document_id)
        if not document:
            raise NotFoundException("Document")
        return document

    async def get_student_documents(self, db: AsyncSession, student_id: uuid.UUID) -> list[Document]:
        result = await db.execute(
            select(Document)
            .where(Document.student_id == student_id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())

    def generate_presigned_url(self, document: Document, expires_in: int = 3600) -> str:
        """Presigned download URL; empty when the object cannot be signed."""
        if not document.s3_key:
            return document.s3_url or ""
        try:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": settings.s3_bucket_name,
                    "Key": document.s3_key,
                    "ResponseContentDisposition": f'attachment; filename="{document.file_name}"',
                },
                ExpiresIn=expires_in,
            )
        except ClientError:
            return ""

    async def delete_document(self, db: AsyncSession, document_id: uuid.UUID) -> None:
        """Delete the document row and its stored object."""
        document = await self.get_document(db, document_id)
        if document.s3_key:
            try:
                self.s3_client.delete_object(Bucket=settings.s3_bucket_name, Key=document.s3_key)
            except ClientError as e:
                logger.warning(f"Could not delete object {document.s3_key}: {e}")

        await db.delete(document)
        await db.commit()

        await get_connection_manager().notify_change("documents", "delete", document_id)


# Singleton instance
_document_service: DocumentService | None = None


def get_document_service() -> DocumentService:
    """Get the document service singleton."""
    global _document_service
    if _document_service is None:
        _document_service = DocumentService()
    return _document_service
