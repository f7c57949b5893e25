# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the API contract for the user module:
# - UserCreate: Input for registering a user
# - UserUpdate: Partial update input
# - UserResponse: Output when returning user data to clients
# - UserList: Paginated listing
# - UserRole / UserStatus: Enums for account state
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """Account roles. GUIDE accounts lead tours."""
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    USER = "USER"
    GUIDE = "GUIDE"


class UserStatus(str, Enum):
    """
    Account activity state.

    - ACTIVE: can sign in and book
    - INACTIVE: deactivated by the user
    - BLOCKED: deactivated by an admin
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"


class UserCreate(BaseModel):
    """
    Schema for registering a new user.

    Example:
        {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "+8801700000000"
        }
    """

    name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Full name"
    )

    email: EmailStr = Field(
        ...,
        description="Unique email address"
    )

    phone: str | None = Field(
        default=None,
        max_length=20,
        description="Contact phone number"
    )

    address: str | None = Field(
        default=None,
        max_length=200,
        description="Postal address"
    )


class UserUpdate(BaseModel):
    """
    Schema for updating a user. Only provided fields are changed.

    Example:
        {"phone": "+8801700000001", "is_active": "INACTIVE"}
    """

    name: str | None = Field(default=None, min_length=2, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=200)
    role: UserRole | None = None
    is_active: UserStatus | None = None
    is_verified: bool | None = None

    def changes(self) -> dict:
        """Fields that were set, serialized for the database."""
        return self.model_dump(exclude_none=True, mode="json")


class UserResponse(BaseModel):
    """Schema for returning user data to clients."""

    id: UUID = Field(..., description="Unique user identifier")
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    role: UserRole = UserRole.USER
    is_active: UserStatus = UserStatus.ACTIVE
    is_verified: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserList(BaseModel):
    """
    Schema for listing users.

    Example:
        {
            "users": [...],
            "total": 42,
            "page": 1,
            "page_size": 10
        }
    """

    users: list[UserResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)
