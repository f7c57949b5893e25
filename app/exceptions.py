# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors tell the client HOW to fix the request, not just WHAT failed.
#
# These are request-level errors: they become JSON responses and never
# reach the process-level fault handlers in app/lifecycle/faults.py.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class TourAPIException(Exception):
    """
    Base exception for the Tour API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TOUR_API_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# User Exceptions
# =============================================================================

class UserNotFoundError(TourAPIException):
    """Raised when a user ID doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            status_code=404,
            suggestion="Check that the user_id is correct",
            details={"user_id": user_id}
        )


class UserAlreadyExistsError(TourAPIException):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str):
        super().__init__(
            message=f"User already exists: {email}",
            code="USER_ALREADY_EXISTS",
            status_code=409,
            suggestion="Sign in with the existing account or register with a different email",
            details={"email": email}
        )


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseUnavailableError(TourAPIException):
    """Raised when a query fails for reasons other than missing rows."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Database request failed: {error}",
            code="DATABASE_UNAVAILABLE",
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def tour_api_exception_handler(
    request: Request,
    exc: TourAPIException
) -> JSONResponse:
    """
    Convert TourAPIException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Keeps FastAPI's per-field error list but wraps it in the API's error shape.
    """
    errors = jsonable_encoder(exc.errors()) if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )
