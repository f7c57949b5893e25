# =============================================================================
# app/lifecycle/bootstrap.py - Process Bootstrapper
# =============================================================================
# Takes the process from cold start to serving, and from any fault or
# signal to a clean exit.
#
# Startup (each step gated on the previous one):
#   1. settings are already validated (app.config fails fast on import)
#   2. connect to the database; on failure log and exit 1 without binding
#   3. bind the listener and serve
#
# Shutdown: see app/lifecycle/shutdown.py. Triggers: see faults.py.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from app.config import Settings, get_settings
from app.lifecycle.errors import DatabaseConnectError, StartupError
from app.lifecycle.faults import FAULT_EXIT_CODE, FaultHandlers
from app.lifecycle.handle import ServerHandle, ServerStatus
from app.lifecycle.shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)

# Exit status when startup fails (database unreachable, port taken)
STARTUP_FAILURE_EXIT_CODE = 1


class Bootstrapper:
    """
    Owns the database connection, the listener and the fault handlers.

    Every collaborator can be injected; by default the bootstrapper serves
    app.main.app with the Supabase client as its database.

    Example:
        bootstrapper = Bootstrapper(settings, app)
        exit_code = asyncio.run(bootstrapper.run())
        sys.exit(exit_code)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        app: Any = None,
        database: Any = None,
        server_handle: ServerHandle | None = None,
        coordinator: ShutdownCoordinator | None = None,
        fault_handlers: FaultHandlers | None = None,
    ):
        self.settings = settings or get_settings()

        if app is None and server_handle is None:
            from app.main import app as default_app
            app = default_app
        self.app = app

        if database is None:
            from lib.supabase_client import SupabaseClient
            database = SupabaseClient
        self.database = database

        self.handle = server_handle or ServerHandle(
            self.app,
            host=self.settings.API_HOST,
            port=self.settings.PORT,
            log_level=self.settings.log_level.lower(),
            graceful_timeout=self.settings.SHUTDOWN_TIMEOUT_SECONDS,
        )
        self.coordinator = coordinator or ShutdownCoordinator(
            timeout=self.settings.SHUTDOWN_TIMEOUT_SECONDS
        )
        # Set once the database is released; a connect finishing later undoes itself
        self._connect_abandoned = threading.Event()
        self.faults = fault_handlers or FaultHandlers(
            self.coordinator,
            signal_exit_code=self.settings.SIGNAL_EXIT_CODE,
        )

        self.coordinator.attach(self.handle)
        self.coordinator.add_cleanup("database", self._release_database)

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def connect_database(self) -> None:
        """
        Connect to the database, retrying with backoff if configured.

        Raises:
            DatabaseConnectError: After the last attempt failed
        """
        attempts = self.settings.DB_CONNECT_RETRIES + 1
        delay = self.settings.DB_CONNECT_RETRY_DELAY

        for attempt in range(1, attempts + 1):
            try:
                await self._connect_in_thread()
            except Exception as e:
                if attempt == attempts:
                    raise DatabaseConnectError(str(e), attempts) from e
                logger.warning(
                    f"Database connection attempt {attempt}/{attempts} failed: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                delay *= 2
            else:
                logger.info("Connected to DB")
                return

    def _connect_in_thread(self) -> asyncio.Future:
        """
        Run one blocking connect attempt on a daemon thread.

        The thread is never joined, so a shutdown that arrives during a slow
        connect exits without waiting for it. If the attempt completes after
        the database was released, the thread disconnects again.
        """
        loop = asyncio.get_running_loop()
        outcome = loop.create_future()

        def attempt() -> None:
            error = None
            try:
                self.database.connect(
                    self.settings.SUPABASE_URL,
                    self.settings.SUPABASE_SERVICE_KEY,
                    self.settings.DATABASE_PROBE_TABLE,
                )
            except Exception as e:
                error = e
            else:
                if self._connect_abandoned.is_set():
                    logger.info("Database connected after shutdown began, releasing it")
                    self.database.disconnect()

            try:
                loop.call_soon_threadsafe(_settle, outcome, error)
            except RuntimeError:
                # Loop already closed: the process is exiting and nobody waits
                logger.debug("Connect attempt finished after the event loop closed")

        threading.Thread(target=attempt, name="db-connect", daemon=True).start()
        return outcome

    async def start(self) -> None:
        """
        Connect, then bind and serve.

        Raises:
            StartupError: If any step fails, or shutdown began before binding
        """
        await self.connect_database()

        # Checked in the same loop step as bind(): no listener after a shutdown request
        if self.coordinator.in_progress:
            raise StartupError("Shutdown requested during startup; listener not bound")
        self.handle.bind()

        await self.handle.start()

        if self.handle.status is ServerStatus.RUNNING:
            logger.info(f"Server is listening on port {self.handle.port}")

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run(self) -> int:
        """
        Run the process lifecycle.

        Returns:
            The exit code the process should terminate with
        """
        self.faults.install(asyncio.get_running_loop())
        try:
            startup = asyncio.create_task(self.start(), name="startup")
            stopping = asyncio.create_task(self.coordinator.wait(), name="shutdown-wait")

            await asyncio.wait({startup, stopping}, return_when=asyncio.FIRST_COMPLETED)

            if not startup.done():
                # A fault or signal finished shutdown before startup did
                startup.cancel()
                await asyncio.gather(startup, return_exceptions=True)
                if self.handle.live:
                    await self.handle.close(self.coordinator.timeout)
                return await stopping

            try:
                startup.result()
            except StartupError as e:
                if self.coordinator.in_progress:
                    return await stopping
                logger.error(f"Startup failed: {e}")
                return await self.coordinator.shutdown(
                    f"Startup failed: {e.message}", STARTUP_FAILURE_EXIT_CODE
                )
            except Exception as e:
                logger.exception("Uncaught exception during startup")
                return await self.coordinator.shutdown(
                    f"Uncaught exception during startup: {e!r}", FAULT_EXIT_CODE
                )

            watcher = asyncio.create_task(self._watch_listener(), name="listener-watch")
            try:
                return await stopping
            finally:
                watcher.cancel()
                await asyncio.gather(watcher, return_exceptions=True)
        finally:
            self.faults.uninstall()

    async def _watch_listener(self) -> None:
        """Treat the listener stopping on its own as a fault."""
        error = await self.handle.wait_stopped()
        if self.coordinator.in_progress:
            return
        logger.error(f"Listener stopped unexpectedly: {error!r}" if error else "Listener stopped unexpectedly")
        self.coordinator.request_shutdown("Listener stopped unexpectedly", FAULT_EXIT_CODE)

    async def _release_database(self) -> None:
        self._connect_abandoned.set()
        await asyncio.to_thread(self.database.disconnect)


def _settle(future: asyncio.Future, error: Exception | None) -> None:
    """Resolve a connect future unless its waiter already gave up."""
    if future.done():
        return
    if error is None:
        future.set_result(None)
    else:
        future.set_exception(error)
