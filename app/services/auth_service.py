"""Authentication service for login and the signed-in profile."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundException, UnauthorizedException
from app.models import Profile, UserRole
from app.schemas.auth import LoginRequest, LoginResponse, ProfileResponse
from app.utils.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

# Highest-privilege role wins when a profile holds several
ROLE_PRECEDENCE = [
    UserRole.ADMIN.value,
    UserRole.PRINCIPAL.value,
    UserRole.REGISTRAR.value,
    UserRole.ACCOUNTING.value,
    UserRole.FINANCE.value,
    UserRole.TEACHER.value,
    UserRole.PARENT.value,
    UserRole.STUDENT.value,
]


def primary_role(profile: Profile) -> str:
    """Pick the role a profile acts as: its granted roles first, then profiles.role."""
    granted = {assignment.role for assignment in profile.roles}
    if profile.role:
        granted.add(profile.role)
    for role in ROLE_PRECEDENCE:
        if role in granted:
            return role
    return UserRole.STUDENT.value


class AuthService:
    """Service for handling authentication operations."""

    async def login(
        self, db: AsyncSession, request: LoginRequest
    ) -> tuple[LoginResponse, Profile]:
        """Authenticate a user and return an access token.

        Raises:
            UnauthorizedException: If credentials are invalid or the account is inactive
        """
        stmt = select(Profile).where(func.lower(Profile.email) == request.email.lower())
        result = await db.execute(stmt)
        profile = result.scalar_one_or_none()

        if not profile or not profile.password_hash:
            raise UnauthorizedException("Invalid email or password")

        if not verify_password(request.password, profile.password_hash):
            raise UnauthorizedException("Invalid email or password")

        if not profile.is_active:
            raise UnauthorizedException("Your account is inactive")

        profile.last_login_at = datetime.now(timezone.utc)
        await db.commit()

        role = primary_role(profile)
        access_token = create_access_token(
            user_id=profile.id,
            role=role,
            name=profile.display_name,
        )
        logger.info(f"User {profile.id} logged in as {role}")

        return (
            LoginResponse(
                access_token=access_token,
                expires_in=settings.jwt_access_token_expire_minutes * 60,
                role=role,
            ),
            profile,
        )

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> ProfileResponse:
        """Get the profile, roles and menu permissions of a user."""
        profile = await db.get(Profile, user_id)
        if not profile:
            raise NotFoundException("Profile")

        return ProfileResponse(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            role=primary_role(profile),
            roles=sorted({a.role for a in profile.roles} | ({profile.role} if profile.role else set())),
            phone=profile.phone,
            avatar_url=profile.avatar_url,
            birth_date=profile.birth_date,
            menu_permissions={p.menu_key: p.is_allowed for p in profile.menu_permissions},
        )


# Singleton instance
_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
