"""School calendar event model."""

import uuid
from datetime import date
from enum import Enum

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class EventType(str, Enum):
    """Stored event types. Birthdays are derived and never stored."""

    HOLIDAY = "holiday"
    EXAM = "exam"
    EVENT = "event"
    MEETING = "meeting"


class SchoolEvent(BaseModel):
    """A dated event on the school calendar."""

    __tablename__ = "school_events"
    __table_args__ = (
        Index("idx_school_events_start", "start_date"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    event_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventType.EVENT.value
    )
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    def occurs_on(self, day: date) -> bool:
        """Check if the event covers the given day."""
        return self.start_date <= day <= (self.end_date or self.start_date)
