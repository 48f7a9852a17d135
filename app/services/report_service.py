"""Report service: enrollment, attendance, academic, financial and teacher reports."""

import csv
import io
import logging
from collections import Counter, defaultdict
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import Invoice, Payment, StudentRecord, Submission, Teacher
from app.models.finance import InvoiceStatus, PaymentStatus
from app.models.student import Gender
from app.services.academic_year_service import AcademicYearScope
from app.services.attendance_service import get_attendance_service
from app.services.grade_level_service import get_grade_level_service, normalize_level_name
from app.utils.display import (
    NO_DATA_MESSAGE,
    attendance_trend,
    format_currency,
    gender_ratio,
    month_label,
    percentage,
    round_half_up,
)

logger = logging.getLogger(__name__)

NEAR_FULL_THRESHOLD = 45
PASSING_PERCENTAGE = 75

# (label, lower bound inclusive), highest first
GRADE_BUCKETS = [
    ("90-100", 90),
    ("80-89", 80),
    ("75-79", 75),
    ("70-74", 70),
    ("Below 70", None),
]


class ReportType(str, Enum):
    ENROLLMENT = "enrollment"
    ATTENDANCE = "attendance"
    ACADEMIC = "academic"
    FINANCIAL = "financial"
    TEACHERS = "teachers"


def grade_bucket(score_pct: float) -> str:
    """Distribution bucket label for a percentage grade."""
    for label, lower in GRADE_BUCKETS:
        if lower is None or score_pct >= lower:
            return label
    return GRADE_BUCKETS[-1][0]


def build_enrollment_report(
    students: Iterable[tuple[str | None, str | None]],
    grade_order: list[str],
) -> dict[str, Any]:
    """Enrollment report from (level, gender) pairs."""
    genders: Counter = Counter()
    by_level: Counter = Counter()
    total = 0
    for level, gender in students:
        total += 1
        by_level[normalize_level_name(level) or "Unassigned"] += 1
        bucket = Gender.normalize(gender)
        if bucket is not None:
            genders[bucket] += 1

    ordered = [name for name in grade_order if by_level.get(name)]
    ordered += sorted(name for name in by_level if name not in grade_order)

    return {
        "empty": total == 0,
        "message": NO_DATA_MESSAGE if total == 0 else None,
        "total": total,
        "male": genders[Gender.MALE],
        "female": genders[Gender.FEMALE],
        "other": genders[Gender.OTHER],
        "male_pct": percentage(genders[Gender.MALE], total, 1),
        "female_pct": percentage(genders[Gender.FEMALE], total, 1),
        "gender_ratio": gender_ratio(genders[Gender.MALE], genders[Gender.FEMALE], genders[Gender.OTHER]),
        "by_grade": [
            {
                "grade": name,
                "count": by_level[name],
                "percentage": percentage(by_level[name], total, 1),
                "capacity_status": "Near Full" if by_level[name] >= NEAR_FULL_THRESHOLD else "Available",
            }
            for name in ordered
        ],
    }


def build_academic_report(percentages: Iterable[float]) -> dict[str, Any]:
    """Pass rate, average and distribution of graded work."""
    scores = list(percentages)
    buckets = Counter(grade_bucket(score) for score in scores)
    total = len(scores)
    passed = sum(1 for score in scores if score >= PASSING_PERCENTAGE)

    return {
        "empty": total == 0,
        "message": NO_DATA_MESSAGE if total == 0 else None,
        "graded_count": total,
        "pass_rate": percentage(passed, total, 1),
        "average_grade": round_half_up(sum(scores) / total, 1) if total else 0.0,
        "distribution": [
            {"range": label, "count": buckets[label], "percentage": percentage(buckets[label], total, 1)}
            for label, _ in GRADE_BUCKETS
        ],
    }


def build_financial_report(
    payments: Iterable[Any],
    invoices: Iterable[Any],
    currency: str,
) -> dict[str, Any]:
    """Collections against invoiced amounts, with revenue per month."""
    collected = Decimal("0")
    monthly: dict[date, Decimal] = defaultdict(Decimal)
    for payment in payments:
        if payment.status != PaymentStatus.PAID.value:
            continue
        amount = Decimal(payment.amount or 0)
        collected += amount
        paid_on = payment.date or payment.created_at.date()
        monthly[paid_on.replace(day=1)] += amount

    expected = Decimal("0")
    outstanding = Decimal("0")
    for invoice in invoices:
        expected += Decimal(invoice.amount or 0)
        if invoice.status != InvoiceStatus.PAID.value:
            outstanding += invoice.balance

    return {
        "currency": currency,
        "total_collected": round_half_up(collected, 2),
        "total_expected": round_half_up(expected, 2),
        "outstanding": round_half_up(outstanding, 2),
        "collection_rate": percentage(collected, expected, 1),
        "monthly_revenue": [
            {"month": month, "label": month_label(month), "amount": round_half_up(monthly[month], 2)}
            for month in sorted(monthly)
        ],
        "display": {
            "total_collected": format_currency(collected, currency),
            "total_expected": format_currency(expected, currency),
            "outstanding": format_currency(outstanding, currency),
        },
    }


def build_teacher_report(teachers: Iterable[Any]) -> dict[str, Any]:
    rows = list(teachers)
    total = len(rows)
    full_time = sum(1 for t in rows if (t.employment_type or "full_time") == "full_time")
    departments = Counter(t.department or "Unassigned" for t in rows)

    return {
        "empty": total == 0,
        "message": NO_DATA_MESSAGE if total == 0 else None,
        "total": total,
        "active": sum(1 for t in rows if t.is_active),
        "full_time": full_time,
        "part_time": total - full_time,
        "full_time_pct": percentage(full_time, total),
        "part_time_pct": percentage(total - full_time, total),
        "by_department": [
            {"department": name, "count": count}
            for name, count in sorted(departments.items(), key=lambda item: (-item[1], item[0]))
        ],
    }


def report_to_csv(report_type: ReportType, report: dict[str, Any]) -> str:
    """Render a report as CSV text: scalar summary rows, then its table."""
    table_keys = {
        ReportType.ENROLLMENT: "by_grade",
        ReportType.ATTENDANCE: "points",
        ReportType.ACADEMIC: "distribution",
        ReportType.FINANCIAL: "monthly_revenue",
        ReportType.TEACHERS: "by_department",
    }
    table_key = table_keys[report_type]

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["metric", "value"])
    for key, value in report.items():
        if key == table_key or isinstance(value, (dict, list)) or value is None:
            continue
        writer.writerow([key, value])

    rows = report.get(table_key) or []
    if rows:
        writer.writerow([])
        columns = list(rows[0].keys())
        writer.writerow(columns)
        for row in rows:
            writer.writerow([row.get(column) for column in columns])

    return output.getvalue()


class ReportService:
    """Service for building school reports."""

    async def enrollment_report(self, db: AsyncSession, scope: AcademicYearScope) -> dict[str, Any]:
        result = await db.execute(
            select(StudentRecord.level, StudentRecord.gender).where(
                StudentRecord.school_year == scope.name
            )
        )
        grade_levels = await get_grade_level_service().get_grade_levels(db)
        report = build_enrollment_report(result.all(), [gl.name for gl in grade_levels])
        report["school_year"] = scope.name
        return report

    async def attendance_report(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, Any]:
        rows = await get_attendance_service().get_monthly_rows(db, scope, date_from, date_to)
        trend = attendance_trend(rows)
        total_marks = sum(total for _, total, _ in rows)
        present_marks = sum(present for _, _, present in rows)
        return {
            **trend,
            "school_year": scope.name,
            "total_marks": total_marks,
            "present_marks": present_marks,
            "average_rate": percentage(present_marks, total_marks, 1),
        }

    async def academic_report(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, Any]:
        query = select(Submission).where(Submission.score.is_not(None))
        if date_from:
            query = query.where(Submission.graded_at >= datetime.combine(date_from, time.min, timezone.utc))
        if date_to:
            query = query.where(Submission.graded_at <= datetime.combine(date_to, time.max, timezone.utc))

        submissions = (await db.execute(query)).scalars().all()
        percentages = [s.percentage for s in submissions if s.percentage is not None]
        return build_academic_report(percentages)

    async def financial_report(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, Any]:
        payments_query = select(Payment)
        invoices_query = select(Invoice)
        if date_from:
            payments_query = payments_query.where(Payment.date >= date_from)
            invoices_query = invoices_query.where(Invoice.due_date >= date_from)
        if date_to:
            payments_query = payments_query.where(Payment.date <= date_to)
            invoices_query = invoices_query.where(Invoice.due_date <= date_to)

        payments = (await db.execute(payments_query)).scalars().all()
        invoices = (await db.execute(invoices_query)).scalars().all()
        return build_financial_report(payments, invoices, settings.currency)

    async def teacher_report(self, db: AsyncSession) -> dict[str, Any]:
        teachers = (await db.execute(select(Teacher))).scalars().all()
        return build_teacher_report(teachers)

    async def build(
        self,
        db: AsyncSession,
        report_type: ReportType,
        scope: AcademicYearScope,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, Any]:
        """Build one report by type."""
        logger.info(f"Building {report_type.value} report for {scope.name}")
        if report_type == ReportType.ENROLLMENT:
            return await self.enrollment_report(db, scope)
        if report_type == ReportType.ATTENDANCE:
            return await self.attendance_report(db, scope, date_from, date_to)
        if report_type == ReportType.ACADEMIC:
            return await self.academic_report(db, date_from, date_to)
        if report_type == ReportType.FINANCIAL:
            return await self.financial_report(db, date_from, date_to)
        return await self.teacher_report(db)


# Singleton instance
_report_service: ReportService | None = None


def get_report_service() -> ReportService:
    """Get the report service singleton."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
