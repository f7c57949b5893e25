# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the API modules:
# - models/: Pydantic schemas for data validation
# - services/: Database operations per module
#
# Services raise the API exceptions from app/exceptions.py directly.
# =============================================================================
