"""Dashboard widgets: KPIs, charts, feeds and queues."""

import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import (
    Announcement,
    Assignment,
    Expense,
    Payment,
    Profile,
    SchoolClass,
    Section,
    StudentRecord,
    Submission,
    SuggestionReview,
)
from app.models.classroom import SubmissionStatus
from app.models.finance import PaymentStatus
from app.models.student import Gender
from app.models.suggestion import SuggestionStatus
from app.models.user import UserRole
from app.services.academic_year_service import AcademicYearScope
from app.services.attendance_service import get_attendance_service
from app.services.finance_service import get_finance_service
from app.services.grade_level_service import section_year_filter
from app.utils.display import (
    NO_ASSIGNMENTS_MESSAGE,
    NO_SUBMISSIONS_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    attendance_trend,
    due_label,
    format_currency,
    gender_ratio,
    merge_transactions,
)

logger = logging.getLogger(__name__)

FEED_LIMIT = 5
QUEUE_LIMIT = 5
DUE_SOON_LIMIT = 10
OVERDUE_WINDOW = timedelta(days=7)
TRANSACTION_LIMIT = 10


def pick_due_soon(assignments: list[Assignment], now: datetime, limit: int = DUE_SOON_LIMIT) -> list[Assignment]:
    """Upcoming work soonest first, then work overdue within the last week, newest first.

    Anything overdue for longer than the window is left out.
    """
    cutoff = now - OVERDUE_WINDOW
    dated = [a for a in assignments if a.due_at is not None and a.due_at >= cutoff]
    upcoming = sorted((a for a in dated if a.due_at >= now), key=lambda a: a.due_at)
    overdue = sorted((a for a in dated if a.due_at < now), key=lambda a: a.due_at, reverse=True)
    return (upcoming + overdue)[:limit]


def due_soon_view(assignments: list[Assignment], now: datetime) -> dict[str, Any]:
    """Assignments with their due labels, in the order given."""
    items = []
    for assignment in assignments:
        label = due_label(assignment.due_at, now)
        items.append({
            "id": assignment.id,
            "title": assignment.title,
            "class_name": assignment.class_name,
            "class_color": assignment.class_color,
            "points": assignment.points,
            "due_at": assignment.due_at,
            "due_label": label["text"],
            "due_tone": label["tone"],
            "days_until": label["days_until"],
        })
    return {
        "empty": not items,
        "message": NO_ASSIGNMENTS_MESSAGE if not items else None,
        "items": items,
    }


def submissions_queue_view(submissions: list[Submission]) -> dict[str, Any]:
    items = [
        {
            "id": s.id,
            "assignment_id": s.assignment_id,
            "assignment_title": s.assignment.title if s.assignment else None,
            "student_id": s.student_id,
            "student_name": s.student.student_name if s.student else None,
            "status": s.status,
            "late": s.late or s.status == SubmissionStatus.LATE.value,
            "submitted_at": s.submitted_at,
        }
        for s in submissions
    ]
    return {
        "empty": not items,
        "message": NO_SUBMISSIONS_MESSAGE if not items else None,
        "items": items,
    }


class DashboardService:
    """Service assembling dashboard widgets for a year."""

    async def get_kpis(self, db: AsyncSession, scope: AcademicYearScope) -> dict[str, Any]:
        """Headline counts for the selected year."""
        students = await db.execute(
            select(func.count(StudentRecord.id)).where(StudentRecord.school_year == scope.name)
        )
        teachers = await db.execute(
            select(func.count(Profile.id)).where(
                Profile.role == UserRole.TEACHER.value,
                Profile.is_active.is_(True),
            )
        )
        classes_query = select(func.count(SchoolClass.id)).where(SchoolClass.is_active.is_(True))
        if scope.id is not None:
            classes_query = classes_query.where(SchoolClass.school_year_id == scope.id)
        classes = await db.execute(classes_query)
        rooms = await db.execute(
            select(func.count(Section.id)).where(
                section_year_filter(scope),
                Section.room.is_not(None),
                Section.room != "",
            )
        )
        suggestions = await db.execute(
            select(func.count(SuggestionReview.id)).where(
                SuggestionReview.status == SuggestionStatus.NEW.value
            )
        )

        return {
            "school_year": scope.name,
            "enrolled_students": students.scalar() or 0,
            "teachers": teachers.scalar() or 0,
            "active_classes": classes.scalar() or 0,
            "sections_with_rooms": rooms.scalar() or 0,
            "pending_suggestions": suggestions.scalar() or 0,
        }

    async def get_gender_ratio(self, db: AsyncSession, scope: AcademicYearScope) -> dict[str, Any]:
        result = await db.execute(
            select(StudentRecord.gender).where(StudentRecord.school_year == scope.name)
        )
        buckets = (Gender.normalize(gender) for gender in result.scalars().all())
        counts = Counter(bucket for bucket in buckets if bucket is not None)
        return gender_ratio(counts[Gender.MALE], counts[Gender.FEMALE], counts[Gender.OTHER])

    async def get_attendance_trend(self, db: AsyncSession, scope: AcademicYearScope) -> dict[str, Any]:
        rows = await get_attendance_service().get_monthly_rows(db, scope)
        return attendance_trend(rows)

    async def get_announcements(
        self,
        db: AsyncSession,
        role: str | None,
        now: datetime | None = None,
    ) -> list[Announcement]:
        """Published, unexpired announcements for a role, newest first."""
        now = now or datetime.now(timezone.utc)
        result = await db.execute(
            select(Announcement)
            .where(Announcement.is_published.is_(True))
            .order_by(Announcement.published_at.desc().nulls_last(), Announcement.created_at.desc())
        )
        visible = [a for a in result.scalars().all() if a.is_visible_to(role, now)]
        return visible[:FEED_LIMIT]

    async def get_due_soon(self, db: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        published = Assignment.published_at.is_not(None)
        upcoming = await db.execute(
            select(Assignment)
            .where(published, Assignment.due_at >= now)
            .order_by(Assignment.due_at)
            .limit(DUE_SOON_LIMIT)
        )
        overdue = await db.execute(
            select(Assignment)
            .where(published, Assignment.due_at >= now - OVERDUE_WINDOW, Assignment.due_at < now)
            .order_by(Assignment.due_at.desc())
            .limit(DUE_SOON_LIMIT)
        )
        rows = [*upcoming.scalars().all(), *overdue.scalars().all()]
        return due_soon_view(pick_due_soon(rows, now), now)

    async def get_submissions_queue(self, db: AsyncSession) -> dict[str, Any]:
        """Handed-in work that still needs grading."""
        result = await db.execute(
            select(Submission)
            .where(
                Submission.status.in_([SubmissionStatus.SUBMITTED.value, SubmissionStatus.LATE.value]),
                Submission.score.is_(None),
            )
            .order_by(Submission.submitted_at.desc().nulls_last())
            .limit(QUEUE_LIMIT)
        )
        return submissions_queue_view(list(result.scalars().all()))

    async def get_recent_transactions(self, db: AsyncSession) -> dict[str, Any]:
        payments = await db.execute(
            select(Payment).order_by(Payment.created_at.desc()).limit(TRANSACTION_LIMIT)
        )
        expenses = await db.execute(
            select(Expense).order_by(Expense.created_at.desc()).limit(TRANSACTION_LIMIT)
        )
        items = merge_transactions(
            payments.scalars().all(),
            expenses.scalars().all(),
            settings.currency,
            TRANSACTION_LIMIT,
        )
        return {
            "empty": not items,
            "message": NO_TRANSACTIONS_MESSAGE if not items else None,
            "items": items,
        }

    async def get_finance_kpis(self, db: AsyncSession, today: date | None = None) -> dict[str, Any]:
        """Finance overview plus this month's collections."""
        today = today or date.today()
        overview = await get_finance_service().get_overview(db)
        month_total = await db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.date >= today.replace(day=1),
                Payment.status == PaymentStatus.PAID.value,
            )
        )
        collected_this_month = month_total.scalar() or 0
        overview["collected_this_month"] = float(collected_this_month)
        overview["display"]["collected_this_month"] = format_currency(collected_this_month, settings.currency)
        return overview

    async def get_dashboard(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
        role: str | None,
    ) -> dict[str, Any]:
        """All widgets in one payload."""
        return {
            "kpis": await self.get_kpis(db, scope),
            "gender_ratio": await self.get_gender_ratio(db, scope),
            "attendance_trend": await self.get_attendance_trend(db, scope),
            "announcements": await self.get_announcements(db, role),
            "due_soon": await self.get_due_soon(db),
            "submissions_queue": await self.get_submissions_queue(db),
            "recent_transactions": await self.get_recent_transactions(db),
            "finance": await self.get_finance_kpis(db),
        }


# Singleton instance
_dashboard_service: DashboardService | None = None


def get_dashboard_service() -> DashboardService:
    """Get the dashboard service singleton."""
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService()
    return _dashboard_service
