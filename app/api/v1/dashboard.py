"""Dashboard API endpoints: the full dashboard and its individual widgets."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.schemas.announcement import AnnouncementResponse
from app.schemas.common import APIResponse
from app.services.academic_year_service import AcademicYearScope
from app.services.dashboard_service import get_dashboard_service
from app.utils.permissions import ACADEMIC_ROLES, FINANCE_ROLES, STAFF_ROLES, require_authenticated, require_role
from app.utils.request_context import get_current_user_role

router = APIRouter()


@router.get("")
@require_role(*STAFF_ROLES)
async def get_dashboard(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """All dashboard widgets for the selected academic year."""
    dashboard = await get_dashboard_service().get_dashboard(db, scope, get_current_user_role())
    dashboard["announcements"] = [
        AnnouncementResponse.model_validate(a).model_dump(mode="json")
        for a in dashboard["announcements"]
    ]
    dashboard["school_year"] = scope.name
    return APIResponse(data=dashboard)


@router.get("/kpis")
@require_role(*STAFF_ROLES)
async def get_kpis(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    return APIResponse(data=await get_dashboard_service().get_kpis(db, scope))


@router.get("/gender-ratio")
@require_role(*STAFF_ROLES)
async def get_gender_ratio(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    return APIResponse(data=await get_dashboard_service().get_gender_ratio(db, scope))


@router.get("/attendance-trend")
@require_role(*STAFF_ROLES)
async def get_attendance_trend(
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    return APIResponse(data=await get_dashboard_service().get_attendance_trend(db, scope))


@router.get("/announcements", response_model=APIResponse[list[AnnouncementResponse]])
@require_authenticated()
async def get_announcements(db: AsyncSession = Depends(get_db)):
    """Latest announcements visible to the caller's role."""
    announcements = await get_dashboard_service().get_announcements(db, get_current_user_role())
    return APIResponse(data=[AnnouncementResponse.model_validate(a) for a in announcements])


@router.get("/due-soon")
@require_role(*ACADEMIC_ROLES)
async def get_due_soon(db: AsyncSession = Depends(get_db)):
    return APIResponse(data=await get_dashboard_service().get_due_soon(db))


@router.get("/submissions")
@require_role(*ACADEMIC_ROLES)
async def get_submissions_queue(db: AsyncSession = Depends(get_db)):
    """Submitted work still waiting for a grade."""
    return APIResponse(data=await get_dashboard_service().get_submissions_queue(db))


@router.get("/transactions")
@require_role(*FINANCE_ROLES)
async def get_recent_transactions(db: AsyncSession = Depends(get_db)):
    return APIResponse(data=await get_dashboard_service().get_recent_transactions(db))


@router.get("/finance")
@require_role(*FINANCE_ROLES)
async def get_finance_kpis(db: AsyncSession = Depends(get_db)):
    return APIResponse(data=await get_dashboard_service().get_finance_kpis(db))
