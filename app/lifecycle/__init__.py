# =============================================================================
# app/lifecycle/ - Process Lifecycle
# =============================================================================
# Startup and shutdown of the server process:
# - bootstrap.py: Bootstrapper - connect database, bind listener, run
# - handle.py: ServerHandle - the bound uvicorn listener
# - shutdown.py: ShutdownCoordinator - one-shot close-then-exit routine
# - faults.py: FaultHandlers - unhandled rejections, uncaught exceptions, signals
# - errors.py: Startup errors
#
# Usage:
#   from app.lifecycle import Bootstrapper
#   sys.exit(asyncio.run(Bootstrapper().run()))
# =============================================================================

from app.lifecycle.bootstrap import Bootstrapper, STARTUP_FAILURE_EXIT_CODE
from app.lifecycle.errors import DatabaseConnectError, ServerStartError, StartupError
from app.lifecycle.faults import FAULT_EXIT_CODE, HANDLED_SIGNALS, FaultHandlers
from app.lifecycle.handle import ManagedServer, ServerHandle, ServerStatus
from app.lifecycle.shutdown import ShutdownCoordinator

__all__ = [
    "Bootstrapper",
    "STARTUP_FAILURE_EXIT_CODE",
    "DatabaseConnectError",
    "ServerStartError",
    "StartupError",
    "FAULT_EXIT_CODE",
    "HANDLED_SIGNALS",
    "FaultHandlers",
    "ManagedServer",
    "ServerHandle",
    "ServerStatus",
    "ShutdownCoordinator",
]
