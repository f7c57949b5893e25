# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by module:
# - health.py: Health check endpoints (mounted by main.py directly)
# - user.py: User registration and management endpoints
#
# MODULE_ROUTES below is the route table: one entry per business module,
# mounted under settings.API_PREFIX in list order. Modules that are not
# ready yet stay in the table with enabled=False; their routers are never
# imported.
# =============================================================================

import importlib
import logging
from dataclasses import dataclass

from fastapi import APIRouter, FastAPI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleRoute:
    """
    One route table entry.

    Attributes:
        path: URL prefix for the module (relative to the API prefix)
        module: Import path of a module exposing a `router` attribute
        enabled: Disabled entries are skipped at mount time
        tags: OpenAPI tags for the module's endpoints
    """

    path: str
    module: str
    enabled: bool = True
    tags: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {self.path!r}")

    def load_router(self) -> APIRouter:
        """Import the module and return its router."""
        return importlib.import_module(self.module).router


MODULE_ROUTES: tuple[ModuleRoute, ...] = (
    ModuleRoute("/user", "app.routers.user", tags=("User",)),
    ModuleRoute("/tour", "app.routers.tour", enabled=False, tags=("Tour",)),
    ModuleRoute("/division", "app.routers.division", enabled=False, tags=("Division",)),
    ModuleRoute("/booking", "app.routers.booking", enabled=False, tags=("Booking",)),
)


def enabled_routes(routes: tuple[ModuleRoute, ...] = MODULE_ROUTES) -> list[ModuleRoute]:
    """Entries that will be mounted, in table order."""
    return [route for route in routes if route.enabled]


def mount_module_routes(
    app: FastAPI | APIRouter,
    routes: tuple[ModuleRoute, ...] = MODULE_ROUTES,
    prefix: str = "",
) -> list[str]:
    """
    Mount every enabled entry onto the app, in table order.

    Order matters when prefixes overlap: the first mounted route wins.

    Returns:
        The full prefixes that were mounted
    """
    mounted: list[str] = []

    for route in routes:
        if not route.enabled:
            logger.debug(f"Module disabled, not mounting: {route.path}")
            continue

        full_path = f"{prefix}{route.path}"
        app.include_router(
            route.load_router(),
            prefix=full_path,
            tags=list(route.tags) or None,
        )
        mounted.append(full_path)
        logger.debug(f"Mounted module {route.module} at {full_path}")

    return mounted


__all__ = [
    "ModuleRoute",
    "MODULE_ROUTES",
    "enabled_routes",
    "mount_module_routes",
]
