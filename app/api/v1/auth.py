"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.schemas.auth import LoginRequest, LoginResponse, ProfileResponse
from app.schemas.common import APIResponse
from app.services.auth_service import get_auth_service
from app.utils.permissions import require_authenticated
from app.utils.request_context import get_current_user_id

router = APIRouter()


@router.post("/login", response_model=APIResponse[LoginResponse])
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate with email and password.

    Sets an HttpOnly cookie for browser clients in addition to returning
    the token in the response body.
    """
    auth_service = get_auth_service()
    login_response, profile = await auth_service.login(db, request)

    response.set_cookie(
        key="access_token",
        value=login_response.access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_access_token_expire_minutes * 60,
    )

    return APIResponse(
        data=login_response,
        message=f"Welcome back, {profile.display_name}!",
    )


@router.post("/logout", response_model=APIResponse[None])
async def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie("access_token")
    return APIResponse(message="Logged out")


@router.get("/me", response_model=APIResponse[ProfileResponse])
@require_authenticated()
async def get_me(db: AsyncSession = Depends(get_db)):
    """Get the signed-in user's profile."""
    auth_service = get_auth_service()
    profile = await auth_service.get_profile(db, get_current_user_id())
    return APIResponse(data=profile)
