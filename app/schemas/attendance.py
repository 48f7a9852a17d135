"""Pydantic schemas for attendance marking."""

import datetime as dt
import uuid

from pydantic import BaseModel, Field

from app.models.attendance import AttendanceStatus
from app.schemas.common import BaseSchema


class AttendanceMark(BaseModel):
    """A single student's mark in a bulk submission."""

    student_id: uuid.UUID
    status: AttendanceStatus
    notes: str | None = None


class BulkAttendanceCreate(BaseModel):
    """Mark attendance for a whole section on one day."""

    section_id: uuid.UUID
    date: dt.date
    records: list[AttendanceMark] = Field(..., min_length=1)


class AttendanceRecordResponse(BaseSchema):
    id: uuid.UUID
    student_id: uuid.UUID
    section_id: uuid.UUID | None = None
    date: dt.date
    status: str
    notes: str | None = None
