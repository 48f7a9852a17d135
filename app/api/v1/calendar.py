"""Calendar API endpoints: school events, birthdays and month grid."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.models.calendar import EventType
from app.models.user import UserRole
from app.schemas.calendar import SchoolEventCreate, SchoolEventResponse, SchoolEventUpdate
from app.schemas.common import APIResponse
from app.services.academic_year_service import AcademicYearScope
from app.services.calendar_service import get_calendar_service
from app.utils.permissions import STAFF_ROLES, require_authenticated, require_role

router = APIRouter()

EDITOR_ROLES = (UserRole.PRINCIPAL, UserRole.REGISTRAR)


@router.get("/events", response_model=APIResponse[list[SchoolEventResponse]])
@require_authenticated()
async def list_events(
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    event_type: EventType | None = Query(None),
    scope: AcademicYearScope = Depends(get_academic_year_scope),
    db: AsyncSession = Depends(get_db),
):
    """Events of the selected academic year, or of an explicit date range."""
    events = await get_calendar_service().get_events(
        db,
        date_from=date_from or scope.start_date,
        date_to=date_to or scope.end_date,
        event_type=event_type.value if event_type else None,
    )
    return APIResponse(data=[SchoolEventResponse.model_validate(e) for e in events])


@router.post("/events", response_model=APIResponse[SchoolEventResponse])
@require_role(*EDITOR_ROLES)
async def create_event(
    data: SchoolEventCreate,
    db: AsyncSession = Depends(get_db),
):
    event = await get_calendar_service().create_event(db, data)
    return APIResponse(data=SchoolEventResponse.model_validate(event), message="Event created")


@router.put("/events/{event_id}", response_model=APIResponse[SchoolEventResponse])
@require_role(*EDITOR_ROLES)
async def update_event(
    event_id: uuid.UUID,
    data: SchoolEventUpdate,
    db: AsyncSession = Depends(get_db),
):
    event = await get_calendar_service().update_event(db, event_id, data)
    return APIResponse(data=SchoolEventResponse.model_validate(event), message="Event updated")


@router.delete("/events/{event_id}", response_model=APIResponse[None])
@require_role(*EDITOR_ROLES)
async def delete_event(
    event_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_calendar_service().delete_event(db, event_id)
    return APIResponse(message="Event deleted")


@router.get("/birthdays")
@require_role(*STAFF_ROLES)
async def get_birthdays(db: AsyncSession = Depends(get_db)):
    """Today's birthdays and the next upcoming ones."""
    return APIResponse(data=await get_calendar_service().get_birthday_overview(db))


@router.get("/grid")
@require_authenticated()
async def get_month_grid(
    year: int | None = Query(None, ge=1900, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Month view with at most two chips per day; defaults to the current month."""
    today = date.today()
    grid = await get_calendar_service().get_month_grid(
        db, year or today.year, month or today.month, today
    )
    return APIResponse(data=grid)
