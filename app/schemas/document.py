"""Pydantic schemas for student documents and AI document analysis."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.document import DocumentType
from app.schemas.common import BaseSchema


class DocumentResponse(BaseSchema):
    id: uuid.UUID
    student_id: uuid.UUID
    file_name: str
    file_size: int | None = None
    mime_type: str | None = None
    s3_url: str | None = None
    notes: str | None = None
    document_type: str | None = None
    ai_summary: str | None = None
    ai_metadata: dict | None = None
    ai_processed_at: datetime | None = None
    created_at: datetime


class AnalyzeDocumentRequest(BaseModel):
    """Request body of the analyze-document endpoint (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: uuid.UUID | None = Field(None, alias="documentId")
    image_url: str = Field(..., min_length=1, alias="imageUrl")
    mime_type: str | None = Field(None, alias="mimeType")
    original_filename: str = Field("document", alias="originalFilename")


class AnalysisMetadata(BaseModel):
    """Details read off the document, with the model's confidence."""

    personal_info: dict[str, Any] = Field(default_factory=dict)
    academic_info: dict[str, Any] = Field(default_factory=dict)
    detected_fields: list[str] = Field(default_factory=list)
    language: str | None = None
    confidence: float = Field(0.5, ge=0.0, le=1.0)


class DocumentAnalysis(BaseModel):
    """Normalised analysis of a document image."""

    document_type: DocumentType = DocumentType.OTHER
    extracted_text: str = ""
    summary: str = ""
    keywords: list[str] = Field(default_factory=list)
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)
    suggested_filename: str = ""


class AnalyzeDocumentResponse(BaseModel):
    success: bool = True
    analysis: DocumentAnalysis
