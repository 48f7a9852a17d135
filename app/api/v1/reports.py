"""Report API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.schemas.common import APIResponse
from app.services.academic_year_service import AcademicYearScope
from app.services.report_service import ReportType, get_report_service, report_to_csv
from app.utils.permissions import STAFF_ROLES, require_role

router = APIRouter()


@router.get("/{report_type}")
@require_role(*STAFF_ROLES)
async def get_report(
    report_type: ReportType,
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Build an enrollment, attendance, academic, financial or teachers report."""
    report = await get_report_service().build(db, report_type, scope, date_from, date_to)
    return APIResponse(data=report)


@router.get("/{report_type}/export.csv")
@require_role(*STAFF_ROLES)
async def export_report(
    report_type: ReportType,
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Download a report as CSV."""
    report = await get_report_service().build(db, report_type, scope, date_from, date_to)
    filename = f"{report_type.value}-report-{scope.name}.csv"
    return Response(
        content=report_to_csv(report_type, report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
