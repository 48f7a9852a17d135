"""Student record, parent, enrollment and pending enrollment models."""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class Gender(str, Enum):
    """Gender buckets used by enrollment statistics."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

    @classmethod
    def normalize(cls, value: str | None) -> "Gender | None":
        """Map free-text gender values ("M", "Female", ...) onto a bucket; blank values have none."""
        cleaned = (value or "").strip().lower()
        if not cleaned:
            return None
        if cleaned in ("male", "m"):
            return cls.MALE
        if cleaned in ("female", "f"):
            return cls.FEMALE
        return cls.OTHER


class StudentStatus(str, Enum):
    """Lifecycle status of a student record."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"
    DROPPED = "dropped"


class EnrollmentStatus(str, Enum):
    """Status of a student's enrollment in a section."""

    ENROLLED = "enrolled"
    DROPPED = "dropped"
    TRANSFERRED = "transferred"
    COMPLETED = "completed"


class PendingEnrollmentStatus(str, Enum):
    """Review status of an enrollment application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class StudentRecord(BaseModel):
    """Demographic and enrollment profile of a student."""

    __tablename__ = "student_records"
    __table_args__ = (
        Index("idx_student_records_year_level", "school_year", "level"),
        Index("idx_student_records_section", "section_id"),
        Index("idx_student_records_lrn", "lrn"),
    )

    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    suffix: Mapped[str | None] = mapped_column(String(20), nullable=True)
    lrn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Denormalised level name ("Grade 1", "Kinder 1") and year name ("2025-2026")
    level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    school_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    grade_level_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("grade_levels.id", ondelete="SET NULL"),
        nullable=True,
    )
    section_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sections.id", ondelete="SET NULL"),
        nullable=True,
    )
    strand_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("strands.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str | None] = mapped_column(
        String(20), nullable=True, default=StudentStatus.ACTIVE.value
    )

    father_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    father_contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mother_maiden_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    mother_contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    guardian_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    phil_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    uae_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    section = relationship("Section", lazy="selectin")
    grade_level = relationship("GradeLevel", lazy="selectin")
    student_parents = relationship(
        "StudentParent",
        back_populates="student",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    documents = relationship(
        "Document",
        back_populates="student",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    @property
    def gender_bucket(self) -> Gender | None:
        """Get the normalised gender bucket."""
        return Gender.normalize(self.gender)


class Parent(BaseModel):
    """A parent or guardian contact."""

    __tablename__ = "parents"

    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def full_name(self) -> str:
        """Get the parent's full name."""
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class StudentParent(BaseModel):
    """Join table linking parents to students."""

    __tablename__ = "student_parents"
    __table_args__ = (
        UniqueConstraint("student_id", "parent_id", name="uq_student_parents_pair"),
    )

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("parents.id", ondelete="CASCADE"),
        nullable=False,
    )
    relationship_type: Mapped[str | None] = mapped_column(
        "relationship",  # Keep DB column name as 'relationship'
        String(30),
        nullable=True,
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    student = relationship("StudentRecord", back_populates="student_parents", lazy="selectin")
    parent = relationship("Parent", lazy="selectin")


class Enrollment(BaseModel):
    """A student's membership in a section for an academic year."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "school_year_id", name="uq_enrollments_student_year"),
        Index("idx_enrollments_section", "section_id"),
    )

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="CASCADE"),
        nullable=False,
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
    )
    school_year_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ENROLLED.value
    )
    enrolled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    dropped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    student = relationship("StudentRecord", lazy="selectin")
    section = relationship("Section", lazy="selectin")


class PendingEnrollment(BaseModel):
    """An enrollment application awaiting registrar review."""

    __tablename__ = "pending_enrollments"
    __table_args__ = (
        Index("idx_pending_enrollments_status", "status"),
    )

    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    lrn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grade_level_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("grade_levels.id", ondelete="SET NULL"),
        nullable=True,
    )
    strand_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("strands.id", ondelete="SET NULL"),
        nullable=True,
    )
    father_contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mother_contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phil_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    uae_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    validation_errors: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PendingEnrollmentStatus.PENDING.value
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    student_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("student_records.id", ondelete="SET NULL"),
        nullable=True,
    )

    grade_level = relationship("GradeLevel", lazy="selectin")
