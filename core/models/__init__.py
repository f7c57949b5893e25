# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: User registration/update/response schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .user import (
    UserCreate,
    UserList,
    UserResponse,
    UserRole,
    UserStatus,
    UserUpdate,
)

__all__ = [
    "UserCreate",
    "UserList",
    "UserResponse",
    "UserRole",
    "UserStatus",
    "UserUpdate",
]
