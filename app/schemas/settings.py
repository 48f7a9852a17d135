"""Pydantic schemas for school settings and suggestions."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.models.suggestion import SuggestionStatus, SuggestionType
from app.schemas.common import BaseSchema


class SchoolSettingsUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = None
    phone: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    website: str | None = Field(None, max_length=255)
    principal: str | None = Field(None, max_length=200)
    founded_year: int | None = Field(None, ge=1800, le=2100)
    logo_url: str | None = Field(None, max_length=500)


class SchoolSettingsResponse(BaseSchema):
    id: uuid.UUID | None = None
    name: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    principal: str | None = None
    founded_year: int | None = None
    logo_url: str | None = None


class SuggestionCreate(BaseModel):
    type: SuggestionType = SuggestionType.SUGGESTION
    subject: str | None = Field(None, max_length=200)
    message: str = Field(..., min_length=1)
    email: EmailStr | None = None


class SuggestionReviewUpdate(BaseModel):
    status: SuggestionStatus
    admin_notes: str | None = None


class SuggestionResponse(BaseSchema):
    id: uuid.UUID
    type: str
    subject: str | None = None
    message: str
    email: str | None = None
    status: str
    admin_notes: str | None = None
    submitted_by: uuid.UUID | None = None
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
