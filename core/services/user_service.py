# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user CRUD operations against the `users` table.
# Separates HTTP concerns from database logic.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, is_no_rows_error
from lib.utils import normalize_uuid
from core.models.user import UserCreate, UserRole, UserStatus, UserUpdate
from app.exceptions import UserAlreadyExistsError, UserNotFoundError, DatabaseUnavailableError

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class UserService:
    """
    Service for user management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_user(payload: UserCreate) -> dict[str, Any]:
        """
        Register a new user.

        Returns:
            Created user dict

        Raises:
            UserAlreadyExistsError: If the email is already registered
            DatabaseUnavailableError: If the insert fails
        """
        client = SupabaseClient.get_client()
        email = payload.email.lower()

        try:
            existing = (
                client.table(USERS_TABLE)
                .select("id")
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to check existing user: {e}")
            raise DatabaseUnavailableError(str(e))

        if existing.data:
            raise UserAlreadyExistsError(email)

        data = payload.model_dump(mode="json")
        data["email"] = email
        data["role"] = UserRole.USER.value
        data["is_active"] = UserStatus.ACTIVE.value
        data["is_verified"] = False

        try:
            response = client.table(USERS_TABLE).insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to create user: {e}")
            raise DatabaseUnavailableError(str(e))

        if not response.data:
            raise DatabaseUnavailableError("Insert returned no data")

        user = response.data[0]
        logger.info(f"Created user: {user['id']}")
        return user

    @staticmethod
    def get_user(user_id: str | UUID) -> dict[str, Any]:
        """
        Get a user by ID.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table(USERS_TABLE)
                .select("*")
                .eq("id", user_id_str)
                .single()
                .execute()
            )
        except Exception as e:
            if is_no_rows_error(e):
                raise UserNotFoundError(user_id_str)
            logger.error(f"Failed to fetch user {user_id_str}: {e}")
            raise DatabaseUnavailableError(str(e))

        if not response.data:
            raise UserNotFoundError(user_id_str)
        return response.data

    @staticmethod
    def update_user(user_id: str | UUID, payload: UserUpdate) -> dict[str, Any]:
        """
        Apply a partial update.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user = UserService.get_user(user_id)
        changes = payload.changes()
        if not changes:
            return user  # Nothing to update

        client = SupabaseClient.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table(USERS_TABLE)
                .update(changes)
                .eq("id", user_id_str)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update user {user_id_str}: {e}")
            raise DatabaseUnavailableError(str(e))

        if response.data:
            logger.info(f"Updated user: {user_id_str}")
            return response.data[0]
        return {**user, **changes}

    @staticmethod
    def list_users(
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List users with pagination, newest first.

        Returns:
            Tuple of (users list, total count)
        """
        client = SupabaseClient.get_client()

        offset = (page - 1) * page_size
        query = (
            client.table(USERS_TABLE)
            .select("*", count="exact")
            .order("created_at", desc=True)
            .range(offset, offset + page_size - 1)
        )

        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise DatabaseUnavailableError(str(e))

        return response.data or [], response.count or 0
