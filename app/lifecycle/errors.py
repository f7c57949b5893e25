# =============================================================================
# app/lifecycle/errors.py - Lifecycle Errors
# =============================================================================
# Errors raised while bringing the process up. Any of them aborts startup:
# the listener is never left half-started.
# =============================================================================

from typing import Any

from lib.utils import ApplicationError


class StartupError(ApplicationError):
    """Base class for failures that abort startup."""

    def __init__(
        self,
        message: str,
        code: str = "STARTUP_FAILED",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class DatabaseConnectError(StartupError):
    """Raised when the data store could not be reached at startup."""

    def __init__(self, error: str, attempts: int):
        super().__init__(
            message=f"Could not connect to the database after {attempts} attempt(s): {error}",
            code="DATABASE_CONNECT_FAILED",
            suggestion="Check SUPABASE_URL / SUPABASE_SERVICE_KEY and that the database is reachable",
            details={"attempts": attempts},
        )


class ServerStartError(StartupError):
    """Raised when the listener cannot be bound or does not come up."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code="SERVER_START_FAILED",
            suggestion="Check that API_HOST/PORT are valid and the port is not already in use",
            details=details,
        )
