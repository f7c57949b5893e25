# =============================================================================
# tests/fakes.py - Test Doubles for the Lifecycle
# =============================================================================
# In-memory stand-ins for the database and the listener. Both record what
# happened to a shared `events` list so tests can assert on ordering.
# =============================================================================

import asyncio
import time

from app.lifecycle.errors import ServerStartError
from app.lifecycle.handle import ServerStatus
from lib.supabase_client import SupabaseClientError


class FakeDatabase:
    """Database with the SupabaseClient connect/disconnect interface."""

    def __init__(self, events=None, fail_times=0, always_fail=False, connect_delay=0.0):
        self.events = events if events is not None else []
        self.fail_times = fail_times
        self.always_fail = always_fail
        self.connect_delay = connect_delay
        self.connect_calls = 0
        self.connected = False
        self.last_args = None

    def connect(self, url, key, probe_table):
        self.events.append("db.connect")
        self.last_args = (url, key, probe_table)
        self.connect_calls += 1
        if self.connect_delay:
            time.sleep(self.connect_delay)
        if self.always_fail or self.connect_calls <= self.fail_times:
            raise SupabaseClientError("Database probe failed: unreachable", code="CONNECT_FAILED")
        self.connected = True

    def disconnect(self):
        self.events.append("db.disconnect")
        self.connected = False


class FakeHandle:
    """Listener with the ServerHandle interface, no sockets involved."""

    def __init__(self, events=None, port=4000, close_delay=0.0):
        self.events = events if events is not None else []
        self.requested_port = port
        self.close_delay = close_delay
        self.status = ServerStatus.NEW
        self.port = None
        self.close_calls = 0
        self._stopped = asyncio.Event()

    @property
    def live(self):
        return self.status in (ServerStatus.STARTING, ServerStatus.RUNNING)

    def bind(self):
        if self.status is not ServerStatus.NEW:
            raise ServerStartError("Server handle cannot be reopened")
        self.events.append("bind")
        self.port = self.requested_port
        self.status = ServerStatus.STARTING

    async def start(self):
        self.events.append("start")
        self.status = ServerStatus.RUNNING

    async def close(self, timeout=None):
        if not self.live:
            return
        self.close_calls += 1
        self.events.append("close")
        self.status = ServerStatus.CLOSING
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        self.status = ServerStatus.CLOSED
        self._stopped.set()

    async def wait_stopped(self):
        await self._stopped.wait()
        return None

    def crash(self):
        """Simulate the server loop ending on its own."""
        self.events.append("crash")
        self._stopped.set()


async def wait_until(predicate, timeout=2.0, interval=0.01):
    """Poll `predicate` until it is true; fail the test on timeout."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)
