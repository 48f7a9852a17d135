"""Middleware components for SchoolDesk."""

from app.middleware.auth import AuthMiddleware

__all__ = ["AuthMiddleware"]
