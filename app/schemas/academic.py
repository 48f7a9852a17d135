"""Pydantic schemas for academic years, grade levels, sections and subject classes."""

import uuid
from datetime import date

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import BaseSchema


# === Academic Years ===

class AcademicYearCreate(BaseModel):
    """Schema for creating an academic year."""

    name: str = Field(..., pattern=r"^\d{4}-\d{4}$")
    start_date: date
    end_date: date
    is_active: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicYearUpdate(BaseModel):
    """Schema for updating an academic year."""

    start_date: date | None = None
    end_date: date | None = None


class AcademicYearResponse(BaseSchema):
    id: uuid.UUID
    name: str
    start_date: date
    end_date: date
    is_active: bool


# === Grade Levels ===

class GradeLevelCreate(BaseModel):
    """Schema for creating a grade level."""

    name: str = Field(..., min_length=1, max_length=100)
    short_name: str = Field(..., min_length=1, max_length=20)
    order_index: int = Field(0, ge=0)
    is_senior_high: bool = False


class GradeLevelUpdate(BaseModel):
    """Schema for updating a grade level."""

    name: str | None = Field(None, min_length=1, max_length=100)
    short_name: str | None = Field(None, min_length=1, max_length=20)
    order_index: int | None = Field(None, ge=0)
    is_senior_high: bool | None = None
    is_active: bool | None = None


class GradeLevelResponse(BaseSchema):
    id: uuid.UUID
    name: str
    short_name: str
    order_index: int
    is_senior_high: bool
    is_active: bool


class GradeLevelSummary(GradeLevelResponse):
    """Grade level card with counts for the selected academic year."""

    students_count: int = 0
    subjects_count: int = 0
    sections_count: int = 0


# === Sections ===

class SectionCreate(BaseModel):
    """Schema for creating a section."""

    name: str = Field(..., min_length=1, max_length=100)
    room: str | None = Field(None, max_length=50)
    capacity: int | None = Field(None, ge=1)
    adviser_id: uuid.UUID | None = None


class SectionUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    room: str | None = Field(None, max_length=50)
    capacity: int | None = Field(None, ge=1)
    adviser_id: uuid.UUID | None = None


class SectionResponse(BaseSchema):
    id: uuid.UUID | None = None  # None for the placeholder "Section A"
    name: str
    grade_level_id: uuid.UUID
    school_year_id: uuid.UUID | None = None
    room: str | None = None
    capacity: int | None = None
    is_placeholder: bool = False


# === Subjects (classes of a section) ===

class SubjectClassCreate(BaseModel):
    """Schema for adding a subject to a grade's section."""

    subject_name: str = Field(..., min_length=1, max_length=100)
    section_id: uuid.UUID | None = None
    room: str | None = Field(None, max_length=50)
    schedule: str | None = Field(None, max_length=100)
    color: str | None = Field(None, max_length=20)


class SubjectClassUpdate(BaseModel):
    subject_name: str | None = Field(None, min_length=1, max_length=100)
    section_id: uuid.UUID | None = None
    room: str | None = None
    schedule: str | None = None
    color: str | None = None
    is_active: bool | None = None


class SubjectClassResponse(BaseSchema):
    id: uuid.UUID
    subject_name: str
    class_code: str
    section_id: uuid.UUID | None = None
    section_name: str | None = None
    school_year_id: uuid.UUID | None = None
    room: str | None = None
    schedule: str | None = None
    color: str | None = None
    is_active: bool
    students_count: int = 0


class GradeDetailResponse(BaseModel):
    """Grade detail page: sections and the subjects taught in them."""

    grade_level: GradeLevelResponse
    school_year: str
    students_count: int
    sections: list[SectionResponse]
    subjects: list[SubjectClassResponse]
