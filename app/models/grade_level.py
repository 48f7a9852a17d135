"""Grade level, strand and section models."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class GradeLevel(BaseModel):
    """A grade level of the curriculum.

    Examples: "Kindergarten 1", "Grade 1", "Grade 12"
    """

    __tablename__ = "grade_levels"
    __table_args__ = (
        Index("idx_grade_levels_name", "name", unique=True),
        Index("idx_grade_levels_order", "order_index"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    short_name: Mapped[str] = mapped_column(String(20), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_senior_high: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    sections = relationship(
        "Section",
        back_populates="grade_level",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Section.name",
    )
    strands = relationship("Strand", back_populates="grade_level", lazy="selectin")

    def __repr__(self) -> str:
        return f"<GradeLevel {self.short_name}: {self.name}>"


class Strand(BaseModel):
    """Senior-high track (e.g. STEM, ABM) offered at a grade level."""

    __tablename__ = "strands"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    grade_level_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("grade_levels.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    grade_level = relationship("GradeLevel", back_populates="strands", lazy="selectin")


class Section(BaseModel):
    """A named subdivision of a grade level within an academic year."""

    __tablename__ = "sections"
    __table_args__ = (
        Index("idx_sections_grade_level", "grade_level_id"),
        Index("idx_sections_school_year", "school_year_id"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade_level_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("grade_levels.id", ondelete="CASCADE"),
        nullable=False,
    )
    school_year_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="SET NULL"),
        nullable=True,
    )
    adviser_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        nullable=True,
    )
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    grade_level = relationship("GradeLevel", back_populates="sections", lazy="selectin")
    academic_year = relationship("AcademicYear", back_populates="sections", lazy="selectin")
    classes = relationship(
        "SchoolClass",
        back_populates="section",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def has_room(self) -> bool:
        """Check if a room has been assigned."""
        return bool(self.room)
