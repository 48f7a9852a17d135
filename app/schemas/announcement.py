"""Pydantic schemas for announcements."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.user import UserRole
from app.schemas.common import BaseSchema


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str | None = None
    priority: str | None = Field("normal", pattern=r"^(low|normal|high)$")
    target_roles: list[UserRole] = Field(default_factory=list)
    is_published: bool = True
    expires_at: datetime | None = None


class AnnouncementUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = None
    priority: str | None = Field(None, pattern=r"^(low|normal|high)$")
    target_roles: list[UserRole] | None = None
    is_published: bool | None = None
    expires_at: datetime | None = None


class AnnouncementResponse(BaseSchema):
    id: uuid.UUID
    title: str
    content: str | None = None
    priority: str | None = None
    target_roles: list[str] | None = None
    is_published: bool
    published_at: datetime | None = None
    expires_at: datetime | None = None
    author_name: str | None = None
    created_at: datetime
