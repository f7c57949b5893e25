# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module owns the process-wide connection to the data store.
# It implements the singleton pattern to reuse a single client and adds an
# explicit connect step: the client is created AND verified with a probe
# query, so startup can refuse to bind the listener when the database is
# unreachable.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   SupabaseClient.connect()          # at startup (raises on failure)
#   client = SupabaseClient.get_client()
#   client.table("users").select("*").execute()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages: the code says what failed,
    the suggestion says how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def is_no_rows_error(error: Exception) -> bool:
    """Check whether an exception is PostgREST's "no rows" response."""
    return NO_ROWS_CODE in str(error)


class SupabaseClient:
    """
    Process-wide Supabase connection.

    All methods are class methods; the class itself is the handle that the
    bootstrapper connects at startup and releases at shutdown.

    Example:
        SupabaseClient.connect()
        users = SupabaseClient.get_client().table("users").select("*").execute()
        SupabaseClient.disconnect()
    """

    _instance: Client | None = None
    _verified: bool = False

    @classmethod
    def connect(
        cls,
        url: str | None = None,
        key: str | None = None,
        probe_table: str | None = None,
    ) -> Client:
        """
        Create the client and verify the connection with a probe query.

        Blocking; the bootstrapper runs it in a worker thread.

        Args:
            url: Supabase project URL (defaults to settings.SUPABASE_URL)
            key: Service key (defaults to settings.SUPABASE_SERVICE_KEY)
            probe_table: Table to query (defaults to settings.DATABASE_PROBE_TABLE)

        Returns:
            Client: The verified client

        Raises:
            SupabaseClientError: If the client cannot be created or the probe fails
        """
        url = url or settings.SUPABASE_URL
        key = key or settings.SUPABASE_SERVICE_KEY
        probe_table = probe_table or settings.DATABASE_PROBE_TABLE

        try:
            client = create_client(url, key)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
                details={"url": url},
            ) from e

        try:
            client.table(probe_table).select("id").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Database probe failed: {e}",
                code="CONNECT_FAILED",
                suggestion=f"Check that the database is reachable and the '{probe_table}' table exists",
                details={"url": url, "probe_table": probe_table},
            ) from e

        cls._instance = client
        cls._verified = True
        logger.info("Connected to database")
        return client

    @classmethod
    def disconnect(cls) -> None:
        """Drop the shared client. Safe to call when not connected."""
        if cls._instance is not None:
            logger.info("Database connection released")
        cls._instance = None
        cls._verified = False

    @classmethod
    def is_connected(cls) -> bool:
        """True once connect() has succeeded and until disconnect()."""
        return cls._instance is not None and cls._verified

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Creates an unverified client if connect() was never called
        (e.g. when the app runs under a bare `uvicorn app.main:app`).

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized without probe")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @classmethod
    def ping(cls, table: str | None = None) -> None:
        """
        Run the probe query against the current client.

        Raises:
            SupabaseClientError: If the query fails
        """
        table = table or settings.DATABASE_PROBE_TABLE
        client = cls.get_client()
        try:
            client.table(table).select("id").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Database ping failed: {e}",
                code="PING_FAILED",
                details={"table": table},
            ) from e
