"""View-model builders shared by dashboard, calendar, finance and report endpoints.

Everything here is pure: callers pass rows and "now", and get plain dicts back.
"""

import calendar
import math
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

NO_DATA_MESSAGE = "No data available"
NO_ATTENDANCE_MESSAGE = "No attendance data available"
NO_ASSIGNMENTS_MESSAGE = "No upcoming assignments"
NO_SUBMISSIONS_MESSAGE = "All caught up! No submissions to grade."
NO_TRANSACTIONS_MESSAGE = "No transactions yet"

MAX_DAY_CHIPS = 2

EVENT_TYPE_STYLES = {
    "holiday": {"color": "#FFE4E1", "border": "#FF69B4", "icon": "🎉"},
    "exam": {"color": "#E6F3FF", "border": "#4169E1", "icon": "📝"},
    "event": {"color": "#E0FFFF", "border": "#20B2AA", "icon": "📅"},
    "meeting": {"color": "#FFFACD", "border": "#FFD700", "icon": "👥"},
    "birthday": {"color": "#FFE4B5", "border": "#FF8C00", "icon": "🎂"},
}


# === Numbers and money ===

def round_half_up(value: float | Decimal, places: int = 0) -> float:
    """Round the way receipts and charts expect (0.5 goes up)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float | Decimal, total: float | Decimal, places: int = 0) -> float:
    """Percentage of part in total; 0 when total is 0."""
    if not total:
        return 0.0
    return round_half_up(Decimal(str(part)) * 100 / Decimal(str(total)), places)


def format_currency(amount: float | Decimal | None, currency: str = "AED") -> str:
    """Format an amount as "AED 1,234.50"."""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency} {value:,.2f}"


def signed_amount(kind: str, amount: float | Decimal, currency: str = "AED") -> str:
    """Format a transaction amount with + for payments and - for expenses."""
    sign = "+" if kind == "payment" else "-"
    return f"{sign}{format_currency(amount, currency)}"


# === Due dates ===

def days_until(due_at: datetime | None, now: datetime) -> int | None:
    """Whole days until due, rounded up; None without a due date."""
    if due_at is None:
        return None
    if due_at.tzinfo is None:
        due_at = due_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.ceil((due_at - now).total_seconds() / 86400)


def due_label(due_at: datetime | None, now: datetime) -> dict[str, Any]:
    """Label and tone for an assignment's due date."""
    days = days_until(due_at, now)
    if days is None:
        return {"days_until": None, "text": "No due date", "tone": "gray"}
    if days < 0:
        return {"days_until": days, "text": "Overdue", "tone": "red"}
    if days == 0:
        return {"days_until": days, "text": "Due today", "tone": "red"}
    if days == 1:
        return {"days_until": days, "text": "Due tomorrow", "tone": "orange"}
    if days <= 7:
        return {"days_until": days, "text": f"Due in {days} days", "tone": "yellow"}
    return {"days_until": days, "text": f"Due in {days} days", "tone": "gray"}


# === Gender ratio ===

def gender_ratio(male: int, female: int, other: int = 0) -> dict[str, Any]:
    """Pie chart data for a male/female/other split.

    Slices with no members are left out of the chart; an empty population
    yields an explicit empty view model.
    """
    total = male + female + other
    view = {
        "male_count": male,
        "female_count": female,
        "other_count": other,
        "total": total,
        "empty": total == 0,
        "message": NO_DATA_MESSAGE if total == 0 else None,
        "slices": [],
    }
    if total == 0:
        return view

    for name, value in (("Male", male), ("Female", female), ("Other", other)):
        if value > 0:
            view["slices"].append({
                "name": name,
                "value": value,
                "percentage": int(percentage(value, total)),
            })
    return view


# === Birthdays ===

def anchor_on_year(birth_date: date, year: int) -> date:
    """Move a birth date onto another year; Feb 29 becomes Feb 28 off leap years."""
    if birth_date.month == 2 and birth_date.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return birth_date.replace(year=year)


def next_birthday(birth_date: date, today: date) -> date:
    """Next occurrence of a birthday on or after today."""
    upcoming = anchor_on_year(birth_date, today.year)
    if upcoming < today:
        upcoming = anchor_on_year(birth_date, today.year + 1)
    return upcoming


def birthday_entry(
    person_id: Any,
    name: str,
    role: str,
    birth_date: date,
    today: date,
    occurs_on: date | None = None,
) -> dict[str, Any]:
    """Calendar entry for a person's birthday on `occurs_on`, by default the next one."""
    occurs_on = occurs_on or next_birthday(birth_date, today)
    days = (occurs_on - today).days
    if days < 0:
        countdown = f"{-days}d ago"
    elif days == 0:
        countdown = "Today!"
    elif days == 1:
        countdown = "Tomorrow"
    else:
        countdown = f"In {days}d"
    return {
        "id": f"{role}-{person_id}",
        "person_id": str(person_id),
        "person_name": name,
        "person_role": role,
        "title": f"🎂 {name}'s Birthday",
        "date": occurs_on,
        "turning": occurs_on.year - birth_date.year,
        "days_until": days,
        "countdown": countdown,
        "type": "birthday",
        **EVENT_TYPE_STYLES["birthday"],
    }


# === Calendar grid ===

def first_weekday_index(year: int, month: int) -> int:
    """Weekday of the 1st with Sunday = 0."""
    return (date(year, month, 1).weekday() + 1) % 7


def month_grid(
    year: int,
    month: int,
    entries: Iterable[dict[str, Any]],
    today: date | None = None,
) -> dict[str, Any]:
    """Build a month view: leading blanks then one cell per day.

    Each entry needs "start_date" and may carry "end_date"; it is shown on
    every day it covers. A day shows at most two chips plus a "+N more" count.
    """
    leading = first_weekday_index(year, month)
    days_in_month = calendar.monthrange(year, month)[1]
    entries = list(entries)

    cells: list[dict[str, Any]] = [{"day": None} for _ in range(leading)]
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        day_entries = [
            entry for entry in entries
            if entry["start_date"] <= current <= (entry.get("end_date") or entry["start_date"])
        ]
        more = max(len(day_entries) - MAX_DAY_CHIPS, 0)
        cells.append({
            "day": day,
            "date": current,
            "is_today": current == today,
            "chips": day_entries[:MAX_DAY_CHIPS],
            "more_count": more,
            "more_label": f"+{more} more" if more else None,
        })

    return {
        "year": year,
        "month": month,
        "label": date(year, month, 1).strftime("%B %Y"),
        "leading_blanks": leading,
        "days_in_month": days_in_month,
        "cells": cells,
    }


# === Attendance ===

def month_label(month_start: date) -> str:
    """Short month label such as "Jan 2026"."""
    return month_start.strftime("%b %Y")


def attendance_trend(rows: Iterable[tuple[date, int, int]]) -> dict[str, Any]:
    """Monthly attendance points from (month_start, total_marks, present_marks) rows."""
    points = []
    for month_start, total_marks, present_marks in sorted(rows, key=lambda row: row[0]):
        points.append({
            "month": month_start,
            "label": month_label(month_start),
            "total_marks": total_marks,
            "present_marks": present_marks,
            "present_rate_pct": percentage(present_marks, total_marks, 1),
        })
    return {
        "empty": not points,
        "message": NO_ATTENDANCE_MESSAGE if not points else None,
        "points": points,
    }


# === Transactions ===

def merge_transactions(
    payments: Iterable[Any],
    expenses: Iterable[Any],
    currency: str = "AED",
    limit: int = 10,
) -> list[dict[str, Any]]:
    """Merge payments and expenses into one newest-first transaction list."""
    rows = []
    for payment in payments:
        rows.append({
            "id": str(payment.id),
            "type": "payment",
            "amount": float(payment.amount),
            "description": payment.type or "Payment",
            "date": payment.date or payment.created_at.date(),
            "reference": payment.reference,
            "student_name": payment.student_name,
            "category": None,
        })
    for expense in expenses:
        rows.append({
            "id": str(expense.id),
            "type": "expense",
            "amount": float(expense.amount),
            "description": expense.description,
            "date": expense.date or expense.created_at.date(),
            "reference": None,
            "student_name": None,
            "category": expense.category,
        })

    rows.sort(key=lambda row: row["date"], reverse=True)
    rows = rows[:limit]
    for row in rows:
        row["display_amount"] = signed_amount(row["type"], row["amount"], currency)
    return rows
