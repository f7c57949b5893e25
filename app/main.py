# =============================================================================
# app/main.py - FastAPI Application
# =============================================================================
# Builds the FastAPI application with middleware, exception handlers and the
# module route table. The process lifecycle (database connection, listener,
# signals) lives in app/lifecycle and is started by app/server.py.
#
# Usage:
#   python -m app                          # full lifecycle
#   uvicorn app.main:app --reload          # development only
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import (
    TourAPIException,
    tour_api_exception_handler,
    validation_exception_handler,
)
from app.routers import MODULE_ROUTES, ModuleRoute, health, mount_module_routes

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs inside the listener: startup happens after the socket is bound,
    shutdown happens while the listener is closing.
    """
    logger.info(f"Starting Tour API in {settings.ENVIRONMENT} mode")
    logger.info(f"Mounted modules: {app.state.mounted_modules}")

    yield

    logger.info("Tour API application shutting down")


def create_app(routes: tuple[ModuleRoute, ...] = MODULE_ROUTES) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        routes: Route table to mount under settings.API_PREFIX

    Returns:
        FastAPI: The configured application
    """
    application = FastAPI(
        title="Tour Management API",
        description="Tour management backend: users today, tours, divisions and bookings as they are enabled.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    application.add_exception_handler(TourAPIException, tour_api_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    @application.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions raised inside a request."""
        logger.exception(f"Unexpected error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            }
        )

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    application.include_router(
        health.router,
        prefix=settings.API_PREFIX,
        tags=["Health"]
    )

    application.state.mounted_modules = mount_module_routes(
        application,
        routes,
        prefix=settings.API_PREFIX,
    )

    @application.get("/", tags=["Root"])
    async def root():
        """Root endpoint - returns API info."""
        return {
            "name": "Tour Management API",
            "version": __version__,
            "docs": "/docs",
            "health": f"{settings.API_PREFIX}/health",
        }

    return application


app = create_app()
