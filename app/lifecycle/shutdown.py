# =============================================================================
# app/lifecycle/shutdown.py - Shutdown Coordinator
# =============================================================================
# The single shutdown routine every trigger converges on:
#   1. close the listener (if live), bounded by a timeout
#   2. run cleanup callbacks (database release), each bounded
#   3. publish the exit code
#
# The routine is one-shot. The first trigger claims it and decides the exit
# code; later triggers are logged and ignored.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from app.lifecycle.handle import ServerHandle

logger = logging.getLogger(__name__)

CleanupCallback = Callable[[], Awaitable[None]]


class ShutdownCoordinator:
    """
    Idempotent close-then-exit routine.

    The coordinator never calls sys.exit itself: wait() resolves with the
    exit code and the process entry point exits with it.

    Example:
        coordinator = ShutdownCoordinator(timeout=10)
        coordinator.attach(handle)
        coordinator.add_cleanup("database", release_database)

        # from a signal handler
        coordinator.request_shutdown("SIGTERM received", exit_code=1)

        exit_code = await coordinator.wait()
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._handle: ServerHandle | None = None
        self._cleanups: list[tuple[str, CleanupCallback]] = []
        self._in_progress = False
        self._reason: str | None = None
        self._exit_code: int | None = None
        self._finished = asyncio.Event()
        self._task: asyncio.Task | None = None

    def attach(self, handle: ServerHandle) -> None:
        """Set the listener to close on shutdown."""
        self._handle = handle

    def add_cleanup(self, name: str, callback: CleanupCallback) -> None:
        """Register a cleanup to run after the listener closed, in registration order."""
        self._cleanups.append((name, callback))

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def request_shutdown(self, reason: str, exit_code: int = 1) -> asyncio.Task | None:
        """
        Start shutting down from synchronous code (signal/fault handlers).

        Must be called on the event loop thread.

        Returns:
            The shutdown task, or None if a shutdown was already in progress
        """
        if not self._claim(reason, exit_code):
            return None
        self._task = asyncio.get_running_loop().create_task(self._run(), name="shutdown")
        return self._task

    async def shutdown(self, reason: str, exit_code: int = 1) -> int:
        """
        Shut down and return the exit code.

        If another trigger got there first, waits for that shutdown and
        returns its exit code.
        """
        if self._claim(reason, exit_code):
            await self._run()
        return await self.wait()

    async def wait(self) -> int:
        """Resolve with the exit code once shutdown completed."""
        await self._finished.wait()
        return self._exit_code

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _claim(self, reason: str, exit_code: int) -> bool:
        if self._in_progress:
            logger.warning(f"Shutdown already in progress ({self._reason}), ignoring: {reason}")
            return False
        self._in_progress = True
        self._reason = reason
        self._exit_code = exit_code
        logger.info(f"Shutting down: {reason}")
        return True

    async def _run(self) -> None:
        try:
            handle = self._handle
            if handle is not None and handle.live:
                logger.info("Closing listener")
                try:
                    await handle.close(self.timeout)
                except Exception:
                    logger.exception("Error while closing listener")

            for name, cleanup in self._cleanups:
                try:
                    await asyncio.wait_for(cleanup(), self.timeout)
                except asyncio.TimeoutError:
                    logger.error(f"Cleanup '{name}' did not finish within {self.timeout}s")
                except Exception:
                    logger.exception(f"Cleanup '{name}' failed")
        finally:
            logger.info(f"Exiting with status {self._exit_code}")
            self._finished.set()
