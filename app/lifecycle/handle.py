# =============================================================================
# app/lifecycle/handle.py - Server Handle
# =============================================================================
# The bound network listener. Wraps a uvicorn server running on a socket we
# bind ourselves, so binding is an explicit, synchronous step the
# bootstrapper controls.
#
# States: new -> starting (bound) -> running -> closing -> closed
# A handle is single-use: once closed (or failed) it cannot be reopened.
# =============================================================================

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from enum import Enum
from typing import Any

import uvicorn

from app.lifecycle.errors import ServerStartError

logger = logging.getLogger(__name__)

# How often start() checks whether uvicorn finished its startup
STARTUP_POLL_INTERVAL = 0.05


class ServerStatus(str, Enum):
    """Lifecycle state of a ServerHandle."""
    NEW = "new"
    STARTING = "starting"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class ManagedServer(uvicorn.Server):
    """
    uvicorn server that leaves signal handling to the process.

    uvicorn normally captures SIGINT/SIGTERM itself; here the fault handlers
    own those signals and stop the server through ServerHandle.close().
    """

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class ServerHandle:
    """
    The live HTTP listener.

    Example:
        handle = ServerHandle(app, host="0.0.0.0", port=5000)
        handle.bind()
        await handle.start()
        ...
        await handle.close(timeout=10)
    """

    def __init__(
        self,
        app: Any,
        host: str = "0.0.0.0",
        port: int = 5000,
        log_level: str = "info",
        graceful_timeout: float | None = None,
        server_class: type[uvicorn.Server] = ManagedServer,
    ):
        self.app = app
        self.host = host
        self.requested_port = port
        self.log_level = log_level
        self.graceful_timeout = graceful_timeout
        self._server_class = server_class

        self._status = ServerStatus.NEW
        self._socket: socket.socket | None = None
        self._port: int | None = None
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def status(self) -> ServerStatus:
        return self._status

    @property
    def live(self) -> bool:
        """True while a socket is bound and not yet being closed."""
        return self._status in (ServerStatus.STARTING, ServerStatus.RUNNING)

    @property
    def port(self) -> int | None:
        """The bound port (resolved when port 0 was requested)."""
        return self._port

    # -------------------------------------------------------------------------
    # Open
    # -------------------------------------------------------------------------

    def bind(self) -> socket.socket:
        """
        Bind the listening socket.

        Synchronous on purpose: callers check for a pending shutdown and bind
        in the same event loop step.

        Raises:
            ServerStartError: If the handle was already used or bind fails
        """
        if self._status is not ServerStatus.NEW:
            raise ServerStartError(
                f"Server handle cannot be reopened (status: {self._status.value})",
                details={"status": self._status.value},
            )

        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.requested_port))
        except OSError as e:
            sock.close()
            self._status = ServerStatus.CLOSED
            raise ServerStartError(
                f"Could not bind {self.host}:{self.requested_port}: {e}",
                details={"host": self.host, "port": self.requested_port},
            ) from e

        sock.set_inheritable(True)
        self._socket = sock
        self._port = sock.getsockname()[1]
        self._status = ServerStatus.STARTING
        return sock

    async def start(self) -> None:
        """
        Serve on the bound socket and wait until uvicorn accepts connections.

        Binds first if bind() was not called. Returns quietly if close() was
        requested while starting.

        Raises:
            ServerStartError: If uvicorn stops before it finished starting
        """
        if self._socket is None:
            self.bind()

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self._port,
            log_config=None,
            log_level=self.log_level,
            lifespan="on",
            timeout_graceful_shutdown=self.graceful_timeout,
        )
        self._server = self._server_class(config)
        self._serve_task = asyncio.create_task(
            self._server.serve(sockets=[self._socket]),
            name="uvicorn-serve",
        )

        while not self._server.started and not self._serve_task.done():
            await asyncio.sleep(STARTUP_POLL_INTERVAL)

        if self._status is not ServerStatus.STARTING:
            return

        if not self._server.started or self._serve_task.done():
            error = await self.wait_stopped()
            self._close_socket()
            self._status = ServerStatus.CLOSED
            raise ServerStartError(
                f"Server stopped before accepting connections: {error or 'application startup failed'}",
                details={"port": self._port},
            ) from error

        self._status = ServerStatus.RUNNING

    # -------------------------------------------------------------------------
    # Close
    # -------------------------------------------------------------------------

    async def close(self, timeout: float | None = None) -> None:
        """
        Stop accepting connections and let in-flight requests finish.

        If the server has not stopped within `timeout` seconds it is forced
        down. No-op when the handle is not live.
        """
        if not self.live:
            return

        self._status = ServerStatus.CLOSING

        if self._server is None or self._serve_task is None:
            # Bound but never served
            self._close_socket()
            self._status = ServerStatus.CLOSED
            logger.info("Listener closed")
            return

        self._server.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(self._serve_task), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Listener did not close within {timeout}s, forcing exit")
            self._server.force_exit = True
            self._serve_task.cancel()
            await asyncio.gather(self._serve_task, return_exceptions=True)
        except asyncio.CancelledError:
            if not self._serve_task.done():
                raise
        except Exception as e:
            logger.error(f"Listener stopped with an error: {e}")
        finally:
            self._close_socket()
            self._status = ServerStatus.CLOSED

        logger.info("Listener closed")

    async def wait_stopped(self) -> BaseException | None:
        """
        Wait until the serve task ends.

        Returns:
            The exception the server stopped with, if any
        """
        if self._serve_task is None:
            return None
        await asyncio.wait({self._serve_task})
        if self._serve_task.cancelled():
            return None
        return self._serve_task.exception()

    def _close_socket(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
