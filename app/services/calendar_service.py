"""Calendar service: school events, birthdays and the month grid."""

import logging
import uuid
from datetime import date
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundException, ValidationException
from app.models import Profile, SchoolEvent, StudentRecord
from app.models.user import UserRole
from app.schemas.calendar import SchoolEventCreate, SchoolEventUpdate
from app.services.realtime_service import get_connection_manager
from app.utils.display import EVENT_TYPE_STYLES, anchor_on_year, birthday_entry, month_grid
from app.utils.request_context import get_current_user_id_or_none

logger = logging.getLogger(__name__)

MAX_UPCOMING_BIRTHDAYS = 20


def event_entry(event: SchoolEvent) -> dict[str, Any]:
    """Calendar chip for a stored event."""
    event_type = event.event_type if event.event_type in EVENT_TYPE_STYLES else "event"
    return {
        "id": str(event.id),
        "title": event.title,
        "type": event_type,
        "start_date": event.start_date,
        "end_date": event.end_date,
        "description": event.description,
        "location": event.location,
        **EVENT_TYPE_STYLES[event_type],
    }


class CalendarService:
    """Service for school events and birthdays."""

    # === Events ===

    async def get_events(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
        event_type: str | None = None,
    ) -> list[SchoolEvent]:
        """Events overlapping the given range, in start order."""
        query = select(SchoolEvent)
        if date_from:
            query = query.where(
                or_(SchoolEvent.end_date >= date_from, SchoolEvent.start_date >= date_from)
            )
        if date_to:
            query = query.where(SchoolEvent.start_date <= date_to)
        if event_type:
            query = query.where(SchoolEvent.event_type == event_type)

        result = await db.execute(query.order_by(SchoolEvent.start_date, SchoolEvent.title))
        return list(result.scalars().all())

    async def get_event(self, db: AsyncSession, event_id: uuid.UUID) -> SchoolEvent:
        event = await db.get(SchoolEvent, event_id)
        if not event:
            raise NotFoundException("Event")
        return event

    async def create_event(self, db: AsyncSession, data: SchoolEventCreate) -> SchoolEvent:
        event = SchoolEvent(
            **data.model_dump(exclude={"event_type"}),
            event_type=data.event_type.value,
            created_by=get_current_user_id_or_none(),
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)

        await get_connection_manager().notify_change("school_events", "insert", event.id)
        return event

    async def update_event(
        self, db: AsyncSession, event_id: uuid.UUID, data: SchoolEventUpdate
    ) -> SchoolEvent:
        event = await self.get_event(db, event_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "event_type" and value is not None:
                value = value.value
            setattr(event, key, value)

        if event.end_date is not None and event.end_date < event.start_date:
            raise ValidationException([{"field": "end_date", "message": "end_date cannot be before start_date"}])

        await db.commit()
        await db.refresh(event)

        await get_connection_manager().notify_change("school_events", "update", event.id)
        return event

    async def delete_event(self, db: AsyncSession, event_id: uuid.UUID) -> None:
        event = await self.get_event(db, event_id)
        await db.delete(event)
        await db.commit()

        await get_connection_manager().notify_change("school_events", "delete", event_id)

    # === Birthdays ===

    async def _people_with_birthdays(self, db: AsyncSession) -> list[tuple[Any, str, str, date]]:
        """(id, name, role, birth_date) for teachers and students with a birth date."""
        teachers = await db.execute(
            select(Profile.id, Profile.full_name, Profile.birth_date).where(
                Profile.role == UserRole.TEACHER.value,
                Profile.birth_date.is_not(None),
            )
        )
        students = await db.execute(
            select(StudentRecord.id, StudentRecord.student_name, StudentRecord.birth_date).where(
                StudentRecord.birth_date.is_not(None)
            )
        )
        people = [(pid, name or "Teacher", "teacher", born) for pid, name, born in teachers.all()]
        people += [(sid, name, "student", born) for sid, name, born in students.all()]
        return people

    async def get_birthdays(self, db: AsyncSession, today: date | None = None) -> list[dict[str, Any]]:
        """Next birthday of every teacher and student, soonest first."""
        today = today or date.today()
        entries = [
            birthday_entry(pid, name, role, born, today)
            for pid, name, role, born in await self._people_with_birthdays(db)
        ]
        entries.sort(key=lambda entry: (entry["date"], entry["person_name"]))
        return entries

    async def get_birthday_overview(self, db: AsyncSession, today: date | None = None) -> dict[str, Any]:
        """Birthdays falling today and the next upcoming ones."""
        today = today or date.today()
        birthdays = await self.get_birthdays(db, today)
        return {
            "today": [b for b in birthdays if b["date"] == today],
            "upcoming": [b for b in birthdays if b["date"] >= today][:MAX_UPCOMING_BIRTHDAYS],
        }

    # === Month grid ===

    async def get_month_grid(
        self,
        db: AsyncSession,
        year: int,
        month: int,
        today: date | None = None,
    ) -> dict[str, Any]:
        """Month view with events and that month's birthdays."""
        if not 1 <= month <= 12:
            raise ValidationException([{"field": "month", "message": "month must be between 1 and 12"}])

        today = today or date.today()
        first = date(year, month, 1)
        last = date(year + month // 12, month % 12 + 1, 1)

        events = await self.get_events(db, date_from=first, date_to=last)
        entries = [event_entry(event) for event in events]

        for pid, name, role, born in await self._people_with_birthdays(db):
            if born.month != month:
                continue
            occurs_on = anchor_on_year(born, year)
            entry = birthday_entry(pid, name, role, born, today, occurs_on=occurs_on)
            entry["start_date"] = occurs_on
            entries.append(entry)

        return month_grid(year, month, entries, today)


# Singleton instance
_calendar_service: CalendarService | None = None


def get_calendar_service() -> CalendarService:
    """Get the calendar service singleton."""
    global _calendar_service
    if _calendar_service is None:
        _calendar_service = CalendarService()
    return _calendar_service
