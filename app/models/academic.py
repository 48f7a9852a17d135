"""Academic year, subject and subject assignment models."""

import uuid
from datetime import date

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class AcademicYear(BaseModel):
    """A named school-year period, e.g. "2025-2026"."""

    __tablename__ = "academic_years"
    __table_args__ = (
        Index("idx_academic_years_name", "name", unique=True),
        # At most one active year
        Index(
            "idx_academic_years_active",
            "is_active",
            unique=True,
            postgresql_where=text("is_active = true"),
        ),
    )

    name: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    sections = relationship("Section", back_populates="academic_year", lazy="selectin")

    def contains(self, day: date) -> bool:
        """Check if a date falls inside this academic year."""
        return self.start_date <= day <= self.end_date

    def __repr__(self) -> str:
        return f"<AcademicYear {self.name}>"


class Subject(BaseModel):
    """A catalogue subject that can be assigned to sections."""

    __tablename__ = "subjects"
    __table_args__ = (
        Index("idx_subjects_code", "code", unique=True, postgresql_where=text("code IS NOT NULL")),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    units: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    assignments = relationship(
        "SubjectAssignment",
        back_populates="subject",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SubjectAssignment(BaseModel):
    """A subject taught by a teacher in a section for a school year."""

    __tablename__ = "subject_assignments"
    __table_args__ = (
        Index("idx_subject_assignments_section", "section_id"),
        Index("idx_subject_assignments_teacher", "teacher_id"),
    )

    subject_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
    )
    school_year_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="SET NULL"),
        nullable=True,
    )
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    schedule: Mapped[str | None] = mapped_column(String(100), nullable=True)

    subject = relationship("Subject", back_populates="assignments", lazy="selectin")
    section = relationship("Section", lazy="selectin")
    teacher = relationship("Teacher", lazy="selectin")
