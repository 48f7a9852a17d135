"""Announcement API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import UserRole
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate
from app.schemas.common import APIResponse
from app.services.announcement_service import get_announcement_service
from app.utils.permissions import require_authenticated, require_role
from app.utils.request_context import get_current_user_role

router = APIRouter()

AUTHOR_ROLES = (UserRole.PRINCIPAL, UserRole.REGISTRAR)


@router.get("", response_model=APIResponse[list[AnnouncementResponse]])
@require_authenticated()
async def list_announcements(
    include_hidden: bool = Query(False, description="Admins only: include drafts and expired"),
    db: AsyncSession = Depends(get_db),
):
    announcements = await get_announcement_service().get_announcements(
        db, get_current_user_role(), include_hidden=include_hidden
    )
    return APIResponse(data=[AnnouncementResponse.model_validate(a) for a in announcements])


@router.post("", response_model=APIResponse[AnnouncementResponse])
@require_role(*AUTHOR_ROLES)
async def create_announcement(
    data: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
):
    announcement = await get_announcement_service().create_announcement(db, data)
    return APIResponse(
        data=AnnouncementResponse.model_validate(announcement),
        message="Announcement published" if announcement.is_published else "Announcement saved as draft",
    )


@router.get("/{announcement_id}", response_model=APIResponse[AnnouncementResponse])
@require_authenticated()
async def get_announcement(
    announcement_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    announcement = await get_announcement_service().get_announcement(db, announcement_id)
    return APIResponse(data=AnnouncementResponse.model_validate(announcement))


@router.put("/{announcement_id}", response_model=APIResponse[AnnouncementResponse])
@require_role(*AUTHOR_ROLES)
async def update_announcement(
    announcement_id: uuid.UUID,
    data: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
):
    announcement = await get_announcement_service().update_announcement(db, announcement_id, data)
    return APIResponse(
        data=AnnouncementResponse.model_validate(announcement),
        message="Announcement updated",
    )


@router.delete("/{announcement_id}", response_model=APIResponse[None])
@require_role(*AUTHOR_ROLES)
async def delete_announcement(
    announcement_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_announcement_service().delete_announcement(db, announcement_id)
    return APIResponse(message="Announcement deleted")
