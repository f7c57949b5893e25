# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Tour Management API:
# - test_bootstrap.py: Startup ordering and every shutdown trigger end-to-end
# - test_shutdown.py: The one-shot shutdown routine
# - test_faults.py: Loop/thread/signal fault handlers
# - test_server_handle.py: The uvicorn listener on a real socket
# - test_route_table.py: Module route table mounting
# - test_user_routes.py / test_user_service.py: The user module
# - test_config.py / test_supabase_client.py: Settings and database client
#
# Run tests with: pytest
# =============================================================================
