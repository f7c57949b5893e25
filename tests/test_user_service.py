# =============================================================================
# tests/test_user_service.py - UserService Tests
# =============================================================================
# The Supabase client is replaced with a MagicMock; each test wires the
# query chain it expects the service to build.
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from app.exceptions import DatabaseUnavailableError, UserAlreadyExistsError, UserNotFoundError
from core.models.user import UserCreate, UserUpdate
from core.services.user_service import UserService


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch("core.services.user_service.SupabaseClient") as supabase:
        supabase.get_client.return_value = client
        yield client


def user_row(**overrides):
    row = {
        "id": str(uuid4()),
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "role": "USER",
        "is_active": "ACTIVE",
        "is_verified": False,
    }
    row.update(overrides)
    return row


class TestCreateUser:
    """Tests for UserService.create_user()."""

    def test_creates_with_defaults(self, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.limit.return_value.execute.return_value = MagicMock(data=[])
        row = user_row()
        table.insert.return_value.execute.return_value = MagicMock(data=[row])

        result = UserService.create_user(UserCreate(name="Ada Lovelace", email="Ada@Example.com"))

        assert result == row
        mock_client.table.assert_called_with("users")
        inserted = table.insert.call_args.args[0]
        assert inserted["email"] == "ada@example.com"
        assert inserted["role"] == "USER"
        assert inserted["is_active"] == "ACTIVE"
        assert inserted["is_verified"] is False

    def test_duplicate_email(self, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.limit.return_value.execute.return_value = MagicMock(
            data=[{"id": str(uuid4())}]
        )

        with pytest.raises(UserAlreadyExistsError):
            UserService.create_user(UserCreate(name="Ada Lovelace", email="ada@example.com"))

        table.insert.assert_not_called()

    def test_insert_failure(self, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.limit.return_value.execute.return_value = MagicMock(data=[])
        table.insert.return_value.execute.side_effect = Exception("connection reset")

        with pytest.raises(DatabaseUnavailableError):
            UserService.create_user(UserCreate(name="Ada Lovelace", email="ada@example.com"))


class TestGetUser:
    """Tests for UserService.get_user()."""

    def test_returns_row(self, mock_client):
        row = user_row()
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.return_value = MagicMock(data=row)

        assert UserService.get_user(row["id"]) == row

    def test_no_rows_is_not_found(self, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.side_effect = Exception(
            "{'code': 'PGRST116', 'message': 'JSON object requested, multiple (or no) rows returned'}"
        )

        with pytest.raises(UserNotFoundError) as exc_info:
            UserService.get_user(uuid4())

        assert exc_info.value.status_code == 404

    def test_other_errors_are_unavailable(self, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.side_effect = Exception("timeout")

        with pytest.raises(DatabaseUnavailableError):
            UserService.get_user(uuid4())


class TestUpdateUser:
    """Tests for UserService.update_user()."""

    def test_applies_changes(self, mock_client):
        row = user_row()
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.single.return_value.execute.return_value = MagicMock(data=row)
        table.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{**row, "role": "GUIDE"}]
        )

        result = UserService.update_user(row["id"], UserUpdate(role="GUIDE"))

        assert result["role"] == "GUIDE"
        table.update.assert_called_once_with({"role": "GUIDE"})

    def test_empty_update_skips_write(self, mock_client):
        row = user_row()
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.single.return_value.execute.return_value = MagicMock(data=row)

        assert UserService.update_user(row["id"], UserUpdate()) == row
        table.update.assert_not_called()


class TestListUsers:
    """Tests for UserService.list_users()."""

    def test_pagination_range(self, mock_client):
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.range.return_value.execute.return_value = MagicMock(data=[user_row()], count=21)

        users, total = UserService.list_users(page=3, page_size=10)

        assert total == 21
        assert len(users) == 1
        query.range.assert_called_once_with(20, 29)
        mock_client.table.return_value.select.assert_called_once_with("*", count="exact")

    def test_empty_result(self, mock_client):
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.range.return_value.execute.return_value = MagicMock(data=None, count=None)

        assert UserService.list_users() == ([], 0)
