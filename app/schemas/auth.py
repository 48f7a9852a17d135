"""Authentication-related Pydantic schemas."""

import uuid
from datetime import date

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import BaseSchema


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response with the access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until token expires
    role: str | None = None


class ProfileResponse(BaseSchema):
    """The signed-in user's profile."""

    id: uuid.UUID
    email: str | None = None
    full_name: str | None = None
    role: str | None = None
    roles: list[str] = Field(default_factory=list)
    phone: str | None = None
    avatar_url: str | None = None
    birth_date: date | None = None
    menu_permissions: dict[str, bool] = Field(default_factory=dict)
