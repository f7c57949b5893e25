# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the web application and its process lifecycle:
# - main.py: App object, middleware, error handlers, route table mounting
# - config.py: Environment variable loading and settings
# - routers/: Route table and API endpoints organized by module
# - lifecycle/: Server startup, fault handling, graceful shutdown
# - server.py: Process entry point (python -m app / tour-api)
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================

__version__ = "1.0.0"
