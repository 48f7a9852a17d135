"""Announcement service."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundException
from app.models import Announcement
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from app.services.realtime_service import get_connection_manager
from app.utils.request_context import get_current_user_id_or_none, is_admin

logger = logging.getLogger(__name__)


class AnnouncementService:
    """Service for managing announcements."""

    async def get_announcements(
        self,
        db: AsyncSession,
        role: str | None,
        include_hidden: bool = False,
    ) -> list[Announcement]:
        """Announcements visible to a role, newest first.

        With include_hidden, drafts, expired and other roles' announcements are listed too.
        """
        result = await db.execute(
            select(Announcement).order_by(
                Announcement.published_at.desc().nulls_last(),
                Announcement.created_at.desc(),
            )
        )
        announcements = list(result.scalars().all())
        if include_hidden and is_admin():
            return announcements

        now = datetime.now(timezone.utc)
        return [a for a in announcements if a.is_visible_to(role, now)]

    async def get_announcement(self, db: AsyncSession, announcement_id: uuid.UUID) -> Announcement:
        announcement = await db.get(Announcement, announcement_id)
        if not announcement:
            raise NotFoundException("Announcement")
        return announcement

    async def create_announcement(self, db: AsyncSession, data: AnnouncementCreate) -> Announcement:
        announcement = Announcement(
            title=data.title,
            content=data.content,
            priority=data.priority,
            target_roles=[role.value for role in data.target_roles] or None,
            is_published=data.is_published,
            published_at=datetime.now(timezone.utc) if data.is_published else None,
            expires_at=data.expires_at,
            created_by=get_current_user_id_or_none(),
        )
        db.add(announcement)
        await db.commit()
        await db.refresh(announcement)

        await get_connection_manager().notify_change("announcements", "insert", announcement.id)
        return announcement

    async def update_announcement(
        self,
        db: AsyncSession,
        announcement_id: uuid.UUID,
        data: AnnouncementUpdate,
    ) -> Announcement:
        announcement = await self.get_announcement(db, announcement_id)
        updates = data.model_dump(exclude_unset=True)

        if "target_roles" in updates:
            roles = updates.pop("target_roles") or []
            announcement.target_roles = [role.value for role in roles] or None
        if updates.get("is_published") and not announcement.published_at:
            announcement.published_at = datetime.now(timezone.utc)

        for key, value in updates.items():
            setattr(announcement, key, value)

        await db.commit()
        await db.refresh(announcement)

        await get_connection_manager().notify_change("announcements", "update", announcement.id)
        return announcement

    async def delete_announcement(self, db: AsyncSession, announcement_id: uuid.UUID) -> None:
        announcement = await self.get_announcement(db, announcement_id)
        await db.delete(announcement)
        await db.commit()

        await get_connection_manager().notify_change("announcements", "delete", announcement_id)


# Singleton instance
_announcement_service: AnnouncementService | None = None


def get_announcement_service() -> AnnouncementService:
    """Get the announcement service singleton."""
    global _announcement_service
    if _announcement_service is None:
        _announcement_service = AnnouncementService()
    return _announcement_service
