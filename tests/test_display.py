# /tests/test_display.py

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from decimal import Decimal

from app.utils.display import (
    NO_ATTENDANCE_MESSAGE,
    NO_DATA_MESSAGE,
    attendance_trend,
    birthday_entry,
    due_label,
    first_weekday_index,
    format_currency,
    gender_ratio,
    merge_transactions,
    month_grid,
    next_birthday,
    percentage,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_format_currency_uses_thousands_separator():
    """Amounts are rendered with the currency code and two decimals."""
    assert format_currency(Decimal("1234.5")) == "AED 1,234.50"
    assert format_currency(None) == "AED 0.00"
    assert format_currency(99.995, "USD") == "USD 100.00"


def test_percentage_handles_zero_total():
    assert percentage(5, 0) == 0.0
    assert percentage(1, 3, 1) == 33.3


def test_gender_ratio_skips_empty_slices():
    """A gender with zero members does not get a pie slice."""
    ratio = gender_ratio(male=2, female=1)

    assert ratio["total"] == 3
    assert ratio["empty"] is False
    assert [s["name"] for s in ratio["slices"]] == ["Male", "Female"]
    assert ratio["slices"][0]["percentage"] == 67
    assert ratio["slices"][1]["percentage"] == 33


def test_gender_ratio_empty_population():
    ratio = gender_ratio(0, 0)
    assert ratio["empty"] is True
    assert ratio["message"] == NO_DATA_MESSAGE
    assert ratio["slices"] == []


def test_due_label_tones():
    """Each due-date window maps to its own label and tone."""
    assert due_label(None, NOW) == {"days_until": None, "text": "No due date", "tone": "gray"}
    assert due_label(NOW - timedelta(days=2), NOW)["text"] == "Overdue"
    assert due_label(NOW, NOW)["text"] == "Due today"
    assert due_label(NOW + timedelta(hours=20), NOW)["tone"] == "orange"

    week = due_label(NOW + timedelta(days=5), NOW)
    assert week == {"days_until": 5, "text": "Due in 5 days", "tone": "yellow"}
    assert due_label(NOW + timedelta(days=12), NOW)["tone"] == "gray"


def test_due_label_accepts_naive_datetimes():
    naive_now = NOW.replace(tzinfo=None)
    assert due_label(naive_now + timedelta(days=1), naive_now)["text"] == "Due tomorrow"


def test_leap_day_birthday_falls_on_feb_28():
    """Feb 29 birthdays are celebrated on Feb 28 in common years."""
    assert next_birthday(date(2016, 2, 29), date(2027, 1, 1)) == date(2027, 2, 28)
    assert next_birthday(date(2016, 2, 29), date(2028, 1, 1)) == date(2028, 2, 29)


def test_birthday_entry_countdowns():
    today = date(2026, 5, 1)

    entry = birthday_entry("abc", "Maria Santos", "teacher", date(1990, 5, 1), today)
    assert entry["countdown"] == "Today!"
    assert entry["id"] == "teacher-abc"
    assert entry["title"] == "🎂 Maria Santos's Birthday"
    assert entry["turning"] == 36

    assert birthday_entry(1, "Liam", "student", date(2019, 5, 2), today)["countdown"] == "Tomorrow"
    assert birthday_entry(1, "Liam", "student", date(2019, 5, 11), today)["countdown"] == "In 10d"


def test_birthday_already_passed_rolls_to_next_year():
    entry = birthday_entry(1, "Sofia", "student", date(2019, 1, 5), date(2026, 5, 1))
    assert entry["date"] == date(2027, 1, 5)


def test_birthday_entry_on_a_given_date():
    entry = birthday_entry(1, "Sofia", "student", date(2019, 1, 5), date(2026, 5, 1), occurs_on=date(2026, 1, 5))
    assert (entry["date"], entry["turning"]) == (date(2026, 1, 5), 7)
    assert (entry["days_until"], entry["countdown"]) == (-116, "116d ago")


def test_first_weekday_index_sunday_is_zero():
    # 1 March 2026 is a Sunday, 1 October 2026 a Thursday
    assert first_weekday_index(2026, 3) == 0
    assert first_weekday_index(2026, 10) == 4


def test_month_grid_limits_chips_per_day():
    """A busy day shows two chips and a "+N more" label."""
    entries = [
        {"title": f"Event {i}", "start_date": date(2026, 10, 5)} for i in range(4)
    ]
    entries.append({"title": "Exams", "start_date": date(2026, 10, 20), "end_date": date(2026, 10, 22)})

    grid = month_grid(2026, 10, entries, today=date(2026, 10, 18))

    assert grid["leading_blanks"] == 4
    assert grid["days_in_month"] == 31
    assert len(grid["cells"]) == 35
    assert all(cell["day"] is None for cell in grid["cells"][:4])

    busy = grid["cells"][4 + 4]
    assert busy["day"] == 5
    assert len(busy["chips"]) == 2
    assert busy["more_count"] == 2
    assert busy["more_label"] == "+2 more"

    spanned = [cell["day"] for cell in grid["cells"][4:] if cell["chips"] and cell["chips"][0]["title"] == "Exams"]
    assert spanned == [20, 21, 22]
    assert grid["cells"][4 + 17]["is_today"] is True


def test_attendance_trend_sorts_months():
    trend = attendance_trend([
        (date(2026, 2, 1), 40, 30),
        (date(2026, 1, 1), 3, 2),
    ])

    assert trend["empty"] is False
    assert [p["label"] for p in trend["points"]] == ["Jan 2026", "Feb 2026"]
    assert trend["points"][0]["present_rate_pct"] == 66.7
    assert trend["points"][1]["present_rate_pct"] == 75.0


def test_attendance_trend_empty():
    trend = attendance_trend([])
    assert trend["empty"] is True
    assert trend["message"] == NO_ATTENDANCE_MESSAGE


def test_merge_transactions_newest_first():
    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    payments = [
        SimpleNamespace(id=1, amount=Decimal("500"), type="Tuition", date=date(2026, 3, 1),
                        created_at=created, reference="PAY-2026-001", student_name="Liam Cruz"),
    ]
    expenses = [
        SimpleNamespace(id=2, amount=Decimal("120.5"), description="Paper", date=date(2026, 3, 4),
                        created_at=created, category="Supplies"),
    ]

    rows = merge_transactions(payments, expenses)

    assert [r["type"] for r in rows] == ["expense", "payment"]
    assert rows[0]["display_amount"] == "-AED 120.50"
    assert rows[1]["display_amount"] == "+AED 500.00"
    assert merge_transactions(payments, expenses, limit=1)[0]["id"] == "2"
