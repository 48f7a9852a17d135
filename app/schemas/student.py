"""Pydantic schemas for student records, enrollments and pending enrollments."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field

from app.models.student import EnrollmentStatus, StudentStatus
from app.schemas.common import BaseSchema


class StudentBase(BaseModel):
    """Base schema for student record data."""

    first_name: str | None = Field(None, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    suffix: str | None = Field(None, max_length=20)
    lrn: str | None = Field(None, max_length=20)
    gender: str | None = Field(None, max_length=10)
    birth_date: date | None = None
    email: EmailStr | None = None
    phone_number: str | None = Field(None, max_length=50)
    level: str | None = Field(None, max_length=50)
    grade_level_id: uuid.UUID | None = None
    section_id: uuid.UUID | None = None
    strand_id: uuid.UUID | None = None
    father_name: str | None = None
    father_contact: str | None = None
    mother_maiden_name: str | None = None
    mother_contact: str | None = None
    guardian_info: str | None = None
    phil_address: str | None = None
    uae_address: str | None = None
    previous_school: str | None = None


class StudentCreate(StudentBase):
    """Schema for creating a student record.

    student_name defaults to "First Middle Last" when not given.
    """

    student_name: str | None = Field(None, max_length=200)
    school_year: str | None = Field(None, pattern=r"^\d{4}-\d{4}$")
    status: StudentStatus = StudentStatus.ACTIVE


class StudentUpdate(StudentBase):
    """Schema for updating a student record."""

    student_name: str | None = Field(None, max_length=200)
    school_year: str | None = Field(None, pattern=r"^\d{4}-\d{4}$")
    status: StudentStatus | None = None


class StudentResponse(StudentBase, BaseSchema):
    id: uuid.UUID
    student_name: str
    email: str | None = None
    age: int | None = None
    school_year: str | None = None
    status: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class StudentListItem(BaseSchema):
    """Row of the student list."""

    id: uuid.UUID
    student_name: str
    lrn: str | None = None
    gender: str | None = None
    level: str | None = None
    school_year: str | None = None
    section_id: uuid.UUID | None = None
    status: str | None = None
    birth_date: date | None = None


# === Enrollments ===

class EnrollmentCreate(BaseModel):
    student_id: uuid.UUID
    section_id: uuid.UUID


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentResponse(BaseSchema):
    id: uuid.UUID
    student_id: uuid.UUID
    section_id: uuid.UUID
    school_year_id: uuid.UUID
    status: str
    enrolled_at: datetime | None = None
    dropped_at: datetime | None = None


# === Pending enrollments ===

class PendingEnrollmentCreate(BaseModel):
    """An enrollment application."""

    student_name: str | None = Field(None, max_length=200)
    first_name: str | None = Field(None, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    lrn: str | None = Field(None, max_length=20)
    gender: str | None = None
    birth_date: date | None = None
    grade_level_id: uuid.UUID | None = None
    strand_id: uuid.UUID | None = None
    father_contact: str | None = None
    mother_contact: str | None = None
    phil_address: str | None = None
    uae_address: str | None = None
    previous_school: str | None = None


class PendingEnrollmentReview(BaseModel):
    """Registrar decision on a pending enrollment."""

    section_id: uuid.UUID | None = None
    notes: str | None = None


class PendingEnrollmentResponse(BaseSchema):
    id: uuid.UUID
    student_name: str
    lrn: str | None = None
    gender: str | None = None
    birth_date: date | None = None
    age: int | None = None
    grade_level_id: uuid.UUID | None = None
    is_complete: bool
    validation_errors: list | None = None
    status: str
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: uuid.UUID | None = None
    student_id: uuid.UUID | None = None
