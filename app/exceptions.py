"""Custom exception classes and global exception handlers."""

import logging
import traceback

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SchoolDeskException(Exception):
    """Base exception for all SchoolDesk-specific errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(SchoolDeskException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", 404)


class ForbiddenException(SchoolDeskException):
    """Access forbidden exception."""

    def __init__(self, message: str = "You don't have permission to perform this action"):
        super().__init__(message, 403)


class UnauthorizedException(SchoolDeskException):
    """Authentication required exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401)


class ConflictException(SchoolDeskException):
    """Resource conflict exception."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, 409)


class ValidationException(SchoolDeskException):
    """Validation error exception with field-level errors."""

    def __init__(self, errors: list[dict] | str):
        if isinstance(errors, str):
            errors = [{"field": "general", "message": errors}]
        super().__init__("Validation failed", 422)
        self.errors = errors


class UserContextError(SchoolDeskException):
    """User context not set error."""

    def __init__(self, message: str = "User context is required"):
        super().__init__(message, 401)


class AIGatewayError(SchoolDeskException):
    """The AI gateway could not produce an analysis."""

    def __init__(self, message: str = "Document analysis failed", status_code: int = 500):
        super().__init__(message, status_code)


class RateLimitedError(AIGatewayError):
    """The AI gateway rejected the call with HTTP 429."""

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, 429)


class CreditsExhaustedError(AIGatewayError):
    """The AI gateway rejected the call with HTTP 402."""

    def __init__(
        self,
        message: str = "AI credits exhausted. Please add credits to continue.",
    ):
        super().__init__(message, 402)


def create_exception_handlers():
    """Create the JSON exception handlers registered on the application."""

    async def schooldesk_exception_handler(request: Request, exc: SchoolDeskException):
        """Handle SchoolDesk custom exceptions."""
        logger.warning(
            f"SchoolDeskException on {request.method} {request.url.path}: "
            f"{exc.message} (status={exc.status_code})"
        )
        content = {
            "status": "error",
            "message": exc.message,
        }
        if hasattr(exc, "errors"):
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    async def validation_exception_handler(request: Request, exc: ValidationException):
        """Handle validation exceptions with field-level errors."""
        logger.warning(f"ValidationException on {request.method} {request.url.path}: {exc.errors}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "status": "error",
                "message": exc.message,
                "errors": exc.errors,
            },
        )

    async def ai_gateway_exception_handler(request: Request, exc: AIGatewayError):
        """Handle AI gateway failures with the document-analysis response shape."""
        logger.error(
            f"AIGatewayError on {request.method} {request.url.path}: "
            f"{exc.message} (status={exc.status_code})"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
        )

    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}")
        logger.error(f"Exception: {type(exc).__name__}: {exc}")
        tb_lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
        logger.error("".join(tb_lines))

        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "An unexpected error occurred",
            },
        )

    return {
        SchoolDeskException: schooldesk_exception_handler,
        ValidationException: validation_exception_handler,
        AIGatewayError: ai_gateway_exception_handler,
        Exception: generic_exception_handler,
    }
