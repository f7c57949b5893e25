# =============================================================================
# app/routers/user.py - User Module Endpoints
# =============================================================================
# Handles user registration and management.
# Mounted by the route table at {API_PREFIX}/user.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from core.models.user import UserCreate, UserList, UserResponse, UserUpdate
from core.services.user_service import UserService

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate):
    """
    Register a new user.

    New accounts start as active, unverified users with the USER role.
    """
    user = UserService.create_user(payload)
    return UserResponse(**user)


@router.get("/all-users", response_model=UserList)
async def list_users(
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 10,
):
    """List users with pagination, newest first."""
    users, total = UserService.list_users(page=page, page_size=page_size)

    return UserList(
        users=[UserResponse(**u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
):
    """Get a single user."""
    return UserResponse(**UserService.get_user(user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    payload: UserUpdate,
):
    """
    Update a user.

    Only the fields present in the body are changed.
    """
    return UserResponse(**UserService.update_user(user_id, payload))
