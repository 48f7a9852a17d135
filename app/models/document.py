"""Student document model with AI analysis results."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class DocumentType(str, Enum):
    """Document classifications produced by analysis."""

    BIRTH_CERTIFICATE = "birth_certificate"
    REPORT_CARD = "report_card"
    ID_PHOTO = "id_photo"
    TRANSCRIPT = "transcript"
    MEDICAL_RECORD = "medical_record"
    DIPLOMA = "diploma"
    RECOMMENDATION_LETTER = "recommendation_letter"
    CLEARANCE = "clearance"
    ENROLLMENT_FORM = "enrollment_form"
    OTHER = "other"

    @classmethod
    def coerce(cls, value) -> "DocumentType":
        """Map any value onto a known type, defaulting to OTHER."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class Document(BaseModel):
    """A file stored in object storage and attached to a student."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_student", "student_id"),
    )

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="CASCADE"),
        nullable=False,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    s3_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    s3_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    thumbnail_s3_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_s3_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Analysis results, null until analyzed
    document_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    ai_extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_metadata: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    ai_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    student = relationship("StudentRecord", back_populates="documents", lazy="selectin")

    @property
    def is_image(self) -> bool:
        """Check if file is an image."""
        return bool(self.mime_type) and self.mime_type.startswith("image/")

    @property
    def is_analyzed(self) -> bool:
        return self.ai_processed_at is not None
