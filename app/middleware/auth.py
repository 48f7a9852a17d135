"""Authentication middleware for JWT token validation."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.request_context import (
    clear_all_context,
    set_current_user_id,
    set_current_user_name,
    set_current_user_role,
)
from app.utils.security import decode_access_token


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that extracts and validates JWT tokens from requests.

    Only populates the request context; endpoints decide whether a caller is
    required (see app.utils.permissions.require_role).
    """

    # Paths that don't require authentication
    EXEMPT_PATHS = {
        "/",
        "/health",
        "/api/docs",
        "/api/redoc",
        "/api/openapi.json",
        "/api/v1/auth/login",
    }

    # Path prefixes that don't require authentication (WebSocket authenticates via path token)
    EXEMPT_PREFIXES = {
        "/api/v1/ws/",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and extract authentication context."""
        clear_all_context()

        path = request.url.path
        if self._is_exempt_path(path):
            return await call_next(request)

        token = self._extract_token(request)

        if token:
            payload = decode_access_token(token)
            if payload:
                try:
                    set_current_user_id(uuid.UUID(payload["sub"]))
                    if payload.get("role"):
                        set_current_user_role(payload["role"])
                    if payload.get("name"):
                        set_current_user_name(payload["name"])
                except (ValueError, TypeError, KeyError):
                    # Malformed subject, context stays unset
                    clear_all_context()

        response = await call_next(request)

        clear_all_context()

        return response

    def _is_exempt_path(self, path: str) -> bool:
        """Check if the path is exempt from authentication."""
        if path in self.EXEMPT_PATHS:
            return True

        for prefix in self.EXEMPT_PREFIXES:
            if path.startswith(prefix):
                return True

        return False

    def _extract_token(self, request: Request) -> str | None:
        """Extract JWT token from the Authorization header or access_token cookie."""
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return auth_header.removeprefix("Bearer ").strip()

        return request.cookies.get("access_token")
