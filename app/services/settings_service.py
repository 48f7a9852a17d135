"""School settings and suggestion inbox service."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundException
from app.models import SchoolSettings, SuggestionReview
from app.models.suggestion import SuggestionStatus
from app.schemas.settings import SchoolSettingsUpdate, SuggestionCreate, SuggestionReviewUpdate
from app.services.realtime_service import get_connection_manager
from app.utils.request_context import get_current_user_id, get_current_user_id_or_none

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for the single school settings row and suggestions."""

    async def get_school_settings(self, db: AsyncSession) -> SchoolSettings | None:
        result = await db.execute(select(SchoolSettings).order_by(SchoolSettings.created_at).limit(1))
        return result.scalar_one_or_none()

    async def get_school_settings_view(self, db: AsyncSession) -> dict | SchoolSettings:
        """Stored settings, or defaults when none were saved yet."""
        school = await self.get_school_settings(db)
        if school is None:
            return {"id": None, "name": settings.app_name}
        return school

    async def update_school_settings(self, db: AsyncSession, data: SchoolSettingsUpdate) -> SchoolSettings:
        """Update the settings row, creating it on first save."""
        school = await self.get_school_settings(db)
        updates = data.model_dump(exclude_unset=True)
        if school is None:
            school = SchoolSettings(name=updates.pop("name", None) or settings.app_name)
            db.add(school)

        for key, value in updates.items():
            setattr(school, key, value)

        await db.commit()
        await db.refresh(school)

        await get_connection_manager().notify_change("school_settings", "update", school.id)
        return school

    # === Suggestions ===

    async def submit_suggestion(self, db: AsyncSession, data: SuggestionCreate) -> SuggestionReview:
        suggestion = SuggestionReview(
            type=data.type.value,
            subject=data.subject,
            message=data.message,
            email=data.email,
            status=SuggestionStatus.NEW.value,
            submitted_by=get_current_user_id_or_none(),
        )
        db.add(suggestion)
        await db.commit()
        await db.refresh(suggestion)

        await get_connection_manager().notify_change("suggestions_reviews", "insert", suggestion.id)
        return suggestion

    async def get_suggestions(
        self,
        db: AsyncSession,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[SuggestionReview], int]:
        query = select(SuggestionReview)
        if status:
            query = query.where(SuggestionReview.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(SuggestionReview.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def review_suggestion(
        self,
        db: AsyncSession,
        suggestion_id: uuid.UUID,
        data: SuggestionReviewUpdate,
    ) -> SuggestionReview:
        suggestion = await db.get(SuggestionReview, suggestion_id)
        if not suggestion:
            raise NotFoundException("Suggestion")

        suggestion.status = data.status.value
        if data.admin_notes is not None:
            suggestion.admin_notes = data.admin_notes
        suggestion.reviewed_by = get_current_user_id()
        suggestion.reviewed_at = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(suggestion)

        await get_connection_manager().notify_change("suggestions_reviews", "update", suggestion.id)
        return suggestion


# Singleton instance
_settings_service: SettingsService | None = None


def get_settings_service() -> SettingsService:
    """Get the settings service singleton."""
    global _settings_service
    if _settings_service is None:
        _settings_service = SettingsService()
    return _settings_service
