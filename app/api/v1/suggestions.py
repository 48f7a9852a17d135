"""Suggestion and feedback API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.suggestion import SuggestionStatus
from app.models.user import UserRole
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.settings import SuggestionCreate, SuggestionResponse, SuggestionReviewUpdate
from app.services.settings_service import get_settings_service
from app.utils.permissions import require_authenticated, require_role

router = APIRouter()


@router.post("", response_model=APIResponse[SuggestionResponse])
@require_authenticated()
async def submit_suggestion(
    data: SuggestionCreate,
    db: AsyncSession = Depends(get_db),
):
    suggestion = await get_settings_service().submit_suggestion(db, data)
    return APIResponse(
        data=SuggestionResponse.model_validate(suggestion),
        message="Thank you for your feedback",
    )


@router.get("", response_model=APIResponse[list[SuggestionResponse]])
@require_role(UserRole.PRINCIPAL)
async def list_suggestions(
    status: SuggestionStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Review inbox, newest first."""
    suggestions, total = await get_settings_service().get_suggestions(
        db, status.value if status else None, page, page_size
    )
    return APIResponse(
        data=[SuggestionResponse.model_validate(s) for s in suggestions],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.patch("/{suggestion_id}", response_model=APIResponse[SuggestionResponse])
@require_role(UserRole.PRINCIPAL)
async def review_suggestion(
    suggestion_id: uuid.UUID,
    data: SuggestionReviewUpdate,
    db: AsyncSession = Depends(get_db),
):
    suggestion = await get_settings_service().review_suggestion(db, suggestion_id, data)
    return APIResponse(
        data=SuggestionResponse.model_validate(suggestion),
        message=f"Suggestion marked {suggestion.status}",
    )
