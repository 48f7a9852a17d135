"""Attendance API endpoints."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.models.attendance import AttendanceStatus
from app.schemas.attendance import AttendanceRecordResponse, BulkAttendanceCreate
from app.schemas.common import APIResponse, PaginationMeta
from app.services.academic_year_service import AcademicYearScope
from app.services.attendance_service import get_attendance_service
from app.utils.display import attendance_trend
from app.utils.permissions import ACADEMIC_ROLES, require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[AttendanceRecordResponse]])
@require_role(*ACADEMIC_ROLES)
async def list_attendance(
    section_id: uuid.UUID | None = Query(None),
    student_id: uuid.UUID | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    status: AttendanceStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    records, total = await get_attendance_service().get_attendance_records(
        db,
        section_id=section_id,
        student_id=student_id,
        date_from=date_from,
        date_to=date_to,
        status=status,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[AttendanceRecordResponse.model_validate(r) for r in records],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("/bulk", response_model=APIResponse[list[AttendanceRecordResponse]])
@require_role(*ACADEMIC_ROLES)
async def record_bulk_attendance(
    data: BulkAttendanceCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a section's attendance for a day, replacing earlier marks."""
    records = await get_attendance_service().record_bulk(db, data)
    return APIResponse(
        data=[AttendanceRecordResponse.model_validate(r) for r in records],
        message=f"Attendance recorded for {len(records)} students",
    )


@router.get("/trend")
@require_role(*ACADEMIC_ROLES)
async def get_attendance_trend(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Monthly present rate across the selected year."""
    rows = await get_attendance_service().get_monthly_rows(db, scope)
    return APIResponse(data=attendance_trend(rows))
