"""Academic year API endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_academic_year_scope
from app.database import get_db
from app.models.user import UserRole
from app.schemas.academic import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate
from app.schemas.common import APIResponse
from app.services.academic_year_service import AcademicYearScope, get_academic_year_service
from app.utils.permissions import require_authenticated, require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[AcademicYearResponse]])
@require_authenticated()
async def list_academic_years(db: AsyncSession = Depends(get_db)):
    """List academic years, newest first."""
    years = await get_academic_year_service().get_years(db)
    return APIResponse(data=[AcademicYearResponse.model_validate(y) for y in years])


@router.get("/current")
@require_authenticated()
async def get_current_year(scope: AcademicYearScope = Depends(get_academic_year_scope)):
    """The academic year this request resolves to."""
    return APIResponse(data={
        "name": scope.name,
        "id": scope.id,
        "start_date": scope.start_date,
        "end_date": scope.end_date,
        "is_stored": scope.year is not None,
        "is_active": bool(scope.year and scope.year.is_active),
    })


@router.post("", response_model=APIResponse[AcademicYearResponse])
@require_role(UserRole.PRINCIPAL, UserRole.REGISTRAR)
async def create_academic_year(
    data: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an academic year."""
    year = await get_academic_year_service().create_year(
        db,
        name=data.name,
        start_date=data.start_date,
        end_date=data.end_date,
        is_active=data.is_active,
    )
    return APIResponse(
        data=AcademicYearResponse.model_validate(year),
        message="Academic year created successfully",
    )


@router.put("/{year_id}", response_model=APIResponse[AcademicYearResponse])
@require_role(UserRole.PRINCIPAL, UserRole.REGISTRAR)
async def update_academic_year(
    year_id: uuid.UUID,
    data: AcademicYearUpdate,
    db: AsyncSession = Depends(get_db),
):
    year = await get_academic_year_service().update_year(db, year_id, **data.model_dump(exclude_unset=True))
    return APIResponse(
        data=AcademicYearResponse.model_validate(year),
        message="Academic year updated successfully",
    )


@router.post("/{year_id}/activate", response_model=APIResponse[AcademicYearResponse])
@require_role(UserRole.PRINCIPAL)
async def activate_academic_year(
    year_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Make this the one active academic year."""
    year = await get_academic_year_service().activate_year(db, year_id)
    return APIResponse(
        data=AcademicYearResponse.model_validate(year),
        message=f"{year.name} is now the active academic year",
    )
