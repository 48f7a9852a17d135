# /tests/test_calendar.py

import uuid
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from app.exceptions import ValidationException
from app.services.calendar_service import CalendarService, event_entry


def _event(title, start, end=None, event_type="event"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        title=title,
        start_date=start,
        end_date=end,
        event_type=event_type,
        description=None,
        location=None,
    )


@pytest.fixture
def calendar_service():
    service = CalendarService()
    people = [
        (uuid.uuid4(), "Maria Santos", "teacher", date(1990, 2, 14)),
        (uuid.uuid4(), "Leap Kid", "student", date(2016, 2, 29)),
        (uuid.uuid4(), "Liam Cruz", "student", date(2019, 8, 25)),
    ]
    events = [
        _event("Foundation Day", date(2027, 2, 14), event_type="holiday"),
        _event("Exam Week", date(2027, 1, 30), date(2027, 2, 2), event_type="exam"),
    ]
    with patch.object(service, "_people_with_birthdays", AsyncMock(return_value=people)), \
         patch.object(service, "get_events", AsyncMock(return_value=events)):
        yield service


def test_event_entry_unknown_type_styled_as_event():
    entry = event_entry(_event("Fun Run", date(2026, 10, 3), event_type="sports"))
    assert entry["type"] == "event"
    assert entry["icon"] == "📅"


async def test_month_grid_mixes_events_and_birthdays(calendar_service):
    """Birthdays land on the grid's year, next to events covering each day."""
    grid = await calendar_service.get_month_grid(None, 2027, 2, today=date(2027, 2, 1))

    days = {cell["day"]: cell for cell in grid["cells"] if cell["day"]}
    assert grid["leading_blanks"] == 1
    assert [chip["title"] for chip in days[1]["chips"]] == ["Exam Week"]
    assert [chip["title"] for chip in days[14]["chips"]] == ["Foundation Day", "🎂 Maria Santos's Birthday"]

    leap = days[28]["chips"][0]
    assert leap["title"] == "🎂 Leap Kid's Birthday"
    assert leap["turning"] == 11
    assert not days[3]["chips"]


async def test_month_grid_birthday_countdowns_follow_the_shown_date(calendar_service):
    grid = await calendar_service.get_month_grid(None, 2027, 2, today=date(2027, 2, 20))

    days = {cell["day"]: cell for cell in grid["cells"] if cell["day"]}
    maria = days[14]["chips"][1]
    assert (maria["date"], maria["days_until"], maria["countdown"]) == (date(2027, 2, 14), -6, "6d ago")
    leap = days[28]["chips"][0]
    assert (leap["date"], leap["days_until"], leap["countdown"]) == (date(2027, 2, 28), 8, "In 8d")


async def test_month_grid_rejects_bad_month(calendar_service):
    with pytest.raises(ValidationException):
        await calendar_service.get_month_grid(None, 2027, 13)


async def test_birthdays_sorted_soonest_first(calendar_service):
    birthdays = await calendar_service.get_birthdays(None, today=date(2026, 8, 25))

    assert [b["person_name"] for b in birthdays] == ["Liam Cruz", "Maria Santos", "Leap Kid"]
    assert birthdays[0]["countdown"] == "Today!"
    assert birthdays[2]["date"] == date(2027, 2, 28)


async def test_birthday_overview_splits_today(calendar_service):
    overview = await calendar_service.get_birthday_overview(None, today=date(2026, 8, 25))
    assert [b["person_name"] for b in overview["today"]] == ["Liam Cruz"]
    assert len(overview["upcoming"]) == 3
