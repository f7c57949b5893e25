# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Process-wide Supabase connection (connect/probe/release)
# - utils.py: Shared utilities (error base class, UUID normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError, is_no_rows_error
from lib.utils import ApplicationError, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "is_no_rows_error",
    # Utils
    "ApplicationError",
    "normalize_uuid",
]
