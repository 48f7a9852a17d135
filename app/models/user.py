"""User profile, role and menu permission models."""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class UserRole(str, Enum):
    """Roles a dashboard user can hold."""

    ADMIN = "admin"
    PRINCIPAL = "principal"
    REGISTRAR = "registrar"
    ACCOUNTING = "accounting"
    TEACHER = "teacher"
    STUDENT = "student"
    FINANCE = "finance"
    PARENT = "parent"


class Profile(BaseModel):
    """A dashboard user account."""

    __tablename__ = "profiles"
    __table_args__ = (
        Index("idx_profiles_email", "email", unique=True),
        Index("idx_profiles_role", "role"),
    )

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str | None] = mapped_column(String(20), nullable=True, default=UserRole.STUDENT.value)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    roles = relationship(
        "UserRoleAssignment",
        back_populates="profile",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    menu_permissions = relationship(
        "UserMenuPermission",
        back_populates="profile",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def display_name(self) -> str:
        """Get a non-empty name for greetings and audit fields."""
        return self.full_name or self.email or "User"


class UserRoleAssignment(BaseModel):
    """Explicit role grant for a user (user_roles)."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)

    profile = relationship("Profile", back_populates="roles", lazy="selectin")


class UserMenuPermission(BaseModel):
    """Per-user toggle for a dashboard menu entry."""

    __tablename__ = "user_menu_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "menu_key", name="uq_user_menu_permissions_user_menu"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    menu_key: Mapped[str] = mapped_column(String(50), nullable=False)
    is_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    profile = relationship("Profile", back_populates="menu_permissions", lazy="selectin")
