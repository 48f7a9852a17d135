"""Attendance service for daily section attendance."""

import logging
import uuid
from datetime import date

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundException
from app.models import AttendanceRecord, Section
from app.models.attendance import AttendanceStatus
from app.schemas.attendance import BulkAttendanceCreate
from app.services.academic_year_service import AcademicYearScope
from app.services.realtime_service import get_connection_manager
from app.utils.request_context import get_current_user_id_or_none

logger = logging.getLogger(__name__)

PRESENT_STATUSES = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


class AttendanceService:
    """Service for managing attendance records."""

    async def get_attendance_records(
        self,
        db: AsyncSession,
        section_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: AttendanceStatus | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[AttendanceRecord], int]:
        """Get attendance records with optional filters."""
        query = select(AttendanceRecord)

        if section_id:
            query = query.where(AttendanceRecord.section_id == section_id)
        if student_id:
            query = query.where(AttendanceRecord.student_id == student_id)
        if date_from:
            query = query.where(AttendanceRecord.date >= date_from)
        if date_to:
            query = query.where(AttendanceRecord.date <= date_to)
        if status:
            query = query.where(AttendanceRecord.status == status.value)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(AttendanceRecord.date.desc(), AttendanceRecord.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def record_bulk(
        self,
        db: AsyncSession,
        data: BulkAttendanceCreate,
    ) -> list[AttendanceRecord]:
        """Record a section's attendance for one day.

        Existing marks for a student on that day are overwritten.
        """
        if not await db.get(Section, data.section_id):
            raise NotFoundException("Section")

        recorded_by = get_current_user_id_or_none()
        student_ids = [mark.student_id for mark in data.records]

        existing_result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.student_id.in_(student_ids),
                AttendanceRecord.date == data.date,
            )
        )
        existing = {record.student_id: record for record in existing_result.scalars().all()}

        records = []
        for mark in data.records:
            record = existing.get(mark.student_id)
            if record is None:
                record = AttendanceRecord(student_id=mark.student_id, date=data.date)
                db.add(record)
            record.section_id = data.section_id
            record.status = mark.status.value
            record.notes = mark.notes
            record.recorded_by = recorded_by
            records.append(record)

        await db.commit()
        for record in records:
            await db.refresh(record)

        logger.info(
            f"Recorded attendance for {len(records)} students in section {data.section_id} on {data.date}"
        )
        await get_connection_manager().notify_change("attendance_records", "upsert", data.section_id)
        return records

    async def get_monthly_rows(
        self,
        db: AsyncSession,
        scope: AcademicYearScope,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[tuple[date, int, int]]:
        """(month start, total marks, present marks) per month within the year."""
        month = func.date_trunc("month", AttendanceRecord.date)
        present = func.sum(case((AttendanceRecord.status.in_(PRESENT_STATUSES), 1), else_=0))

        query = (
            select(month, func.count(AttendanceRecord.id), present)
            .where(
                AttendanceRecord.date >= (date_from or scope.start_date),
                AttendanceRecord.date <= (date_to or scope.end_date),
            )
            .group_by(month)
            .order_by(month)
        )
        result = await db.execute(query)
        return [
            (month_start.date() if hasattr(month_start, "date") else month_start, total, present_count or 0)
            for month_start, total, present_count in result.all()
        ]


# Singleton instance
_attendance_service: AttendanceService | None = None


def get_attendance_service() -> AttendanceService:
    """Get the attendance service singleton."""
    global _attendance_service
    if _attendance_service is None:
        _attendance_service = AttendanceService()
    return _attendance_service
