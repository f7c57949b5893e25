# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides settings and lifecycle fixtures
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.config import Settings
from app.lifecycle import Bootstrapper
from lib.supabase_client import SupabaseClient
from tests.fakes import FakeDatabase, FakeHandle


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_settings():
    """Build Settings with test defaults; keyword arguments override."""
    def _make(**overrides):
        values = {
            "SUPABASE_URL": "https://test-project.supabase.co",
            "SUPABASE_SERVICE_KEY": "test-service-key",
            "API_HOST": "127.0.0.1",
            "PORT": 4000,
            "SHUTDOWN_TIMEOUT_SECONDS": 1.0,
            "DB_CONNECT_RETRY_DELAY": 0.01,
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def events():
    """Shared, ordered record of lifecycle events."""
    return []


@pytest.fixture
def make_bootstrapper(make_settings, events):
    """Bootstrapper wired to a FakeDatabase and a FakeHandle."""
    def _make(database=None, handle=None, **setting_overrides):
        database = database or FakeDatabase(events)
        handle = handle or FakeHandle(events, port=setting_overrides.get("PORT", 4000))
        return Bootstrapper(
            settings=make_settings(**setting_overrides),
            app=object(),
            database=database,
            server_handle=handle,
        )
    return _make


@pytest.fixture(autouse=True)
def reset_supabase_client():
    """Never leak a shared client between tests."""
    yield
    SupabaseClient.disconnect()
