"""School class model (a subject taught in a section)."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class SchoolClass(BaseModel):
    """A subject class held for one section, optionally led by a teacher."""

    __tablename__ = "classes"
    __table_args__ = (
        Index("idx_classes_section", "section_id"),
        Index("idx_classes_teacher", "teacher_id"),
        Index("idx_classes_code", "class_code", unique=True),
    )

    subject_name: Mapped[str] = mapped_column(String(100), nullable=False)
    class_code: Mapped[str] = mapped_column(String(150), nullable=False)
    section_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=True,
    )
    teacher_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    school_year_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="SET NULL"),
        nullable=True,
    )
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    schedule: Mapped[str | None] = mapped_column(String(100), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    section = relationship("Section", back_populates="classes", lazy="selectin")
    teacher = relationship("Profile", lazy="selectin")
    assignments = relationship(
        "Assignment",
        back_populates="school_class",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def section_name(self) -> str | None:
        """Get the section's name."""
        return self.section.name if self.section else None
