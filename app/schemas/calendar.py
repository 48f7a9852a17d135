"""Pydantic schemas for school events."""

import uuid
from datetime import date

from pydantic import BaseModel, Field, model_validator

from app.models.calendar import EventType
from app.schemas.common import BaseSchema


class SchoolEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date | None = None
    event_type: EventType = EventType.EVENT
    location: str | None = Field(None, max_length=200)
    is_all_day: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class SchoolEventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    event_type: EventType | None = None
    location: str | None = None
    is_all_day: bool | None = None


class SchoolEventResponse(BaseSchema):
    id: uuid.UUID
    title: str
    description: str | None = None
    start_date: date
    end_date: date | None = None
    event_type: str
    location: str | None = None
    is_all_day: bool
