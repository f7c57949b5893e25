# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# ApplicationError is the root of every error raised outside request
# handling: database client failures and lifecycle failures.
# =============================================================================

from typing import Any
from uuid import UUID


class ApplicationError(Exception):
    """
    Error with a stable code and an optional hint for the operator.

    Subclasses fix the code and pass through the rest:

        class ServerStartError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="SERVER_START_FAILED", **kwargs)

    str() renders "[CODE] message" plus the suggestion on its own line, which
    is what ends up in the startup failure log.
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        if self.suggestion:
            return f"[{self.code}] {self.message}\n  Suggestion: {self.suggestion}"
        return f"[{self.code}] {self.message}"


def normalize_uuid(value: str | UUID) -> str:
    """Row ids are stored as text; accept either form from callers."""
    return str(value)
