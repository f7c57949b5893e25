# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Probes for process supervisors:
# - /health        process is up, which build and environment
# - /health/live   event loop is responsive (no I/O)
# - /health/ready  database answers the startup probe query
# =============================================================================

import asyncio
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from app import __version__
from app.config import settings

router = APIRouter()

# Import time of this module, close enough to process start
_STARTED_AT = time.monotonic()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    modules: list[str] = Field(default_factory=list, description="Mounted module prefixes")


class ReadinessResponse(BaseModel):
    """`status` is "ready" or "degraded"; `database` carries the probe error."""
    status: str
    database: str
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    uptime_seconds: float
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Report the running build and which modules the route table mounted."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=__version__,
        modules=getattr(request.app.state, "mounted_modules", []),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Runs the probe query from startup in a worker thread. A failing probe
    reports "degraded" with a 200 so the supervisor decides what to do.
    """
    from lib.supabase_client import SupabaseClient

    try:
        await asyncio.to_thread(SupabaseClient.ping)
        database = "healthy"
    except Exception as e:
        database = f"unhealthy: {str(e)[:80]}"

    return ReadinessResponse(
        status="ready" if database == "healthy" else "degraded",
        database=database,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(
        status="alive",
        uptime_seconds=round(time.monotonic() - _STARTED_AT, 3),
        timestamp=_now(),
    )
