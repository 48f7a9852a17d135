"""Dashboard widget assembly."""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from app.services.academic_year_service import AcademicYearScope
from app.services.dashboard_service import DashboardService, pick_due_soon

NOW = datetime(2025, 10, 15, 9, 0, tzinfo=timezone.utc)


def _assignment(title, due_at):
    return SimpleNamespace(
        id=uuid.uuid4(),
        title=title,
        class_name="Grade 3A",
        class_color="#4f46e5",
        points=20,
        due_at=due_at,
        published_at=NOW - timedelta(days=60),
    )


def _scalars(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def test_stale_assignments_do_not_hide_upcoming_work():
    stale = [_assignment(f"Old {i}", NOW - timedelta(days=30 + i)) for i in range(12)]
    upcoming = _assignment("Essay", NOW + timedelta(days=2))

    picked = pick_due_soon(stale + [upcoming], NOW)

    assert picked == [upcoming]


def test_upcoming_first_then_recently_overdue():
    yesterday = _assignment("Lab report", NOW - timedelta(days=1))
    last_week = _assignment("Worksheet", NOW - timedelta(days=5))
    tomorrow = _assignment("Quiz", NOW + timedelta(days=1))
    next_week = _assignment("Project", NOW + timedelta(days=7))

    picked = pick_due_soon([last_week, next_week, yesterday, tomorrow], NOW)

    assert [a.title for a in picked] == ["Quiz", "Project", "Lab report", "Worksheet"]


def test_pick_due_soon_caps_the_list():
    upcoming = [_assignment(f"Task {i}", NOW + timedelta(hours=i + 1)) for i in range(15)]

    picked = pick_due_soon(upcoming, NOW)

    assert len(picked) == 10
    assert picked[0].title == "Task 0"


async def test_get_due_soon_bounds_overdue_query_and_lists_upcoming():
    stale = [_assignment(f"Old {i}", NOW - timedelta(days=40 + i)) for i in range(11)]
    upcoming = _assignment("Essay", NOW + timedelta(days=1))
    db = MagicMock()
    db.execute = AsyncMock(side_effect=[_scalars([upcoming]), _scalars(stale)])

    view = await DashboardService().get_due_soon(db, now=NOW)

    titles = [item["title"] for item in view["items"]]
    assert titles == ["Essay"]

    overdue_stmt = db.execute.await_args_list[1].args[0]
    params = overdue_stmt.compile().params
    assert NOW - timedelta(days=7) in params.values()
    assert NOW in params.values()


async def test_gender_ratio_leaves_out_blank_genders():
    db = MagicMock()
    db.execute = AsyncMock(return_value=_scalars(["M", "female", None, "", "  "]))

    view = await DashboardService().get_gender_ratio(db, AcademicYearScope(name="2025-2026"))

    assert (view["male_count"], view["female_count"], view["other_count"]) == (1, 1, 0)
    assert view["total"] == 2
