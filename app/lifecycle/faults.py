# =============================================================================
# app/lifecycle/faults.py - Process Fault Handlers
# =============================================================================
# Installs the four process-level triggers that end the process:
# - Unhandled rejection: a task/future failed and nobody retrieved the error
# - Uncaught exception: an event loop callback or a worker thread raised
# - SIGTERM: the process supervisor asked us to stop
# - SIGINT: an operator pressed Ctrl+C
#
# Every trigger logs and hands over to the ShutdownCoordinator.
# Exceptions inside request handlers never get here: FastAPI turns them
# into 500 responses (see app/main.py).
# =============================================================================

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import threading
from typing import Any

from app.lifecycle.shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGTERM, signal.SIGINT)

# Exit status for faults (both kinds)
FAULT_EXIT_CODE = 1


class FaultHandlers:
    """
    Process-wide fault and signal handlers.

    install() is idempotent and uninstall() restores whatever was there
    before, so tests and embedders can run several bootstrappers in a row.
    """

    def __init__(
        self,
        coordinator: ShutdownCoordinator,
        signal_exit_code: int = 1,
        fault_exit_code: int = FAULT_EXIT_CODE,
    ):
        self.coordinator = coordinator
        self.signal_exit_code = signal_exit_code
        self.fault_exit_code = fault_exit_code

        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous_loop_handler = None
        self._previous_thread_hook = None
        self._previous_signals: dict[int, Any] = {}

    @property
    def installed(self) -> bool:
        return self._loop is not None

    # -------------------------------------------------------------------------
    # Install / Uninstall
    # -------------------------------------------------------------------------

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install the handlers on `loop` and the process."""
        if self.installed:
            return
        self._loop = loop

        self._previous_loop_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._handle_loop_exception)

        self._previous_thread_hook = threading.excepthook
        threading.excepthook = self._handle_thread_exception

        for sig in HANDLED_SIGNALS:
            self._previous_signals[sig] = signal.getsignal(sig)
            try:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            except (NotImplementedError, RuntimeError):
                # No loop signal support (Windows) - fall back to signal.signal
                try:
                    signal.signal(sig, self._handle_signal_threadsafe)
                except ValueError:
                    logger.warning(f"Cannot handle {signal.Signals(sig).name} outside the main thread")

        logger.debug("Fault and signal handlers installed")

    def uninstall(self) -> None:
        """Restore the handlers that were active before install()."""
        if not self.installed:
            return
        loop = self._loop

        loop.set_exception_handler(self._previous_loop_handler)
        threading.excepthook = self._previous_thread_hook

        for sig, previous in self._previous_signals.items():
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.remove_signal_handler(sig)
            if previous is not None:
                with contextlib.suppress(ValueError, TypeError):
                    signal.signal(sig, previous)

        self._previous_signals.clear()
        self._loop = None
        logger.debug("Fault and signal handlers removed")

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _handle_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        """
        Event loop exception handler.

        Contexts without an exception, and transport/protocol errors from a
        single client connection, are logged by the default handler and do
        not stop the server.
        """
        exc = context.get("exception")
        if exc is None or "transport" in context or "protocol" in context:
            loop.default_exception_handler(context)
            return

        message = context.get("message", "")
        if "future" in context or "task" in context:
            logger.error(
                f"Unhandled rejection detected... server shutting down: {message}",
                exc_info=exc,
            )
            reason = f"Unhandled rejection: {exc!r}"
        else:
            logger.error(
                f"Uncaught exception detected... server shutting down: {message}",
                exc_info=exc,
            )
            reason = f"Uncaught exception: {exc!r}"

        self.coordinator.request_shutdown(reason, self.fault_exit_code)

    def _handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        """threading.excepthook: an exception escaped a worker thread."""
        if issubclass(args.exc_type, SystemExit):
            return

        thread_name = args.thread.name if args.thread is not None else "unknown"
        logger.error(
            f"Uncaught exception detected in thread {thread_name}... server shutting down",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        reason = f"Uncaught exception in thread {thread_name}: {args.exc_value!r}"

        try:
            self._loop.call_soon_threadsafe(
                self.coordinator.request_shutdown, reason, self.fault_exit_code
            )
        except RuntimeError:
            logger.error("Event loop is closed; cannot schedule shutdown")

    def _handle_signal(self, sig: int) -> None:
        name = signal.Signals(sig).name
        logger.warning(f"{name} signal received... server shutting down")
        self.coordinator.request_shutdown(f"{name} received", self.signal_exit_code)

    def _handle_signal_threadsafe(self, signum: int, frame: Any) -> None:
        self._loop.call_soon_threadsafe(self._handle_signal, signum)
