"""School settings API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import UserRole
from app.schemas.common import APIResponse
from app.schemas.settings import SchoolSettingsResponse, SchoolSettingsUpdate
from app.services.settings_service import get_settings_service
from app.utils.permissions import require_authenticated, require_role

router = APIRouter()


@router.get("/school", response_model=APIResponse[SchoolSettingsResponse])
@require_authenticated()
async def get_school_settings(db: AsyncSession = Depends(get_db)):
    school = await get_settings_service().get_school_settings_view(db)
    if isinstance(school, dict):
        return APIResponse(data=SchoolSettingsResponse(**school))
    return APIResponse(data=SchoolSettingsResponse.model_validate(school))


@router.put("/school", response_model=APIResponse[SchoolSettingsResponse])
@require_role(UserRole.PRINCIPAL)
async def update_school_settings(
    data: SchoolSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update the school profile, creating it on first save."""
    school = await get_settings_service().update_school_settings(db, data)
    return APIResponse(
        data=SchoolSettingsResponse.model_validate(school),
        message="School settings saved",
    )
