"""Role-based permission decorators and utilities."""

from functools import wraps
from typing import Callable

from app.exceptions import ForbiddenException
from app.models.user import UserRole
from app.utils.request_context import get_current_user_id, get_current_user_role

# Role groups used across routers
STAFF_ROLES = (
    UserRole.ADMIN,
    UserRole.PRINCIPAL,
    UserRole.REGISTRAR,
    UserRole.ACCOUNTING,
    UserRole.FINANCE,
    UserRole.TEACHER,
)
FINANCE_ROLES = (UserRole.ADMIN, UserRole.PRINCIPAL, UserRole.ACCOUNTING, UserRole.FINANCE)
REGISTRAR_ROLES = (UserRole.ADMIN, UserRole.PRINCIPAL, UserRole.REGISTRAR)
ACADEMIC_ROLES = (UserRole.ADMIN, UserRole.PRINCIPAL, UserRole.REGISTRAR, UserRole.TEACHER)


def _role_values(roles) -> set[str]:
    values = set()
    for role in roles:
        if isinstance(role, UserRole):
            values.add(role.value)
        else:
            values.add(role)
    return values


def require_role(*allowed_roles: UserRole | str) -> Callable:
    """Decorator that enforces role-based access control.

    Usage:
        @router.post("/payments")
        @require_role(UserRole.ADMIN, UserRole.FINANCE)
        async def create_payment(...):
            ...

    Requires an authenticated caller. Admins can access everything; with no
    roles given any authenticated caller is allowed.
    """
    role_values = _role_values(allowed_roles)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            # Raises UserContextError (401) when unauthenticated
            get_current_user_id()
            current_role = get_current_user_role()

            if current_role == UserRole.ADMIN.value or not role_values:
                return await func(*args, **kwargs)

            if current_role not in role_values:
                raise ForbiddenException()

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_authenticated() -> Callable:
    """Decorator that requires any authenticated user."""
    return require_role()

