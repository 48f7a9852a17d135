"""School-wide announcement model."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class Announcement(BaseModel):
    """An announcement, optionally targeted at specific roles."""

    __tablename__ = "announcements"
    __table_args__ = (
        Index("idx_announcements_published", "is_published", "published_at"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str | None] = mapped_column(String(20), nullable=True)  # low, normal, high
    # Empty or null means everyone
    target_roles: Mapped[list[str] | None] = mapped_column(ARRAY(String(20)), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    author = relationship("Profile", lazy="selectin")

    @property
    def author_name(self) -> str | None:
        return self.author.display_name if self.author else None

    def is_visible_to(self, role: str | None, now: datetime) -> bool:
        """Check if a caller with the given role should see this announcement now."""
        if not self.is_published:
            return False
        if self.expires_at is not None and self.expires_at <= now:
            return False
        if not self.target_roles:
            return True
        return role is not None and role in self.target_roles
