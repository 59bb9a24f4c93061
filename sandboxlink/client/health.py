"""Orchestrator health monitor.

Owns the process-wide orchestrator ``ConnectionStatus``; nothing else writes
it.  Checks run on a recurring timer and on demand, with at most one check
in flight at a time:

- A timer tick while a check is running is skipped.
- ``check_now()`` while a check is running waits for that check instead of
  starting another.

Check outcome -> status::

    SERVING                           connected
    NOT_SERVING                       disconnected
    TransportError with HTTP status   error
    anything else                     disconnected

Check failures are logged, never raised.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

from loguru import logger

from sandboxlink.client.errors import TransportError
from sandboxlink.client.models.enums import ConnectionStatus
from sandboxlink.client.services.base import DataService

StatusListener = Callable[[ConnectionStatus], None]


class HealthMonitor:
    """Tracks orchestrator liveness for the lifetime of the client."""

    def __init__(self, service: DataService, *, interval: float = 30.0) -> None:
        self._service = service
        self._interval = interval
        self._status = ConnectionStatus.DISCONNECTED
        self._checking = False
        self._version: str | None = None
        self._last_checked: datetime | None = None
        self._listeners: list[StatusListener] = []
        self._timer: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[ConnectionStatus] | None = None
        # Set by stop(), cleared by start(); a check finishing while stopped is discarded.
        self._stopped = False

    # -- Read-only state -------------------------------------------------------

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def checking(self) -> bool:
        """True while a check is in flight."""
        return self._checking

    @property
    def version(self) -> str | None:
        return self._version

    @property
    def last_checked(self) -> datetime | None:
        return self._last_checked

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # -- Listeners -------------------------------------------------------------

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Call *listener* with the new status on every change.  Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self._status:
            return
        logger.info("Orchestrator status: {} -> {}", self._status, status)
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Health status listener failed")

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Check immediately, then every ``interval`` seconds.  No-op if already running."""
        if self.running:
            return
        self._stopped = False
        logger.debug("Health monitor started (interval={}s)", self._interval)
        self._timer = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Cancel the timer.  A check already in flight finishes; its result is dropped unless restarted."""
        self._stopped = True
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            logger.debug("Health monitor stopped")

    async def _run(self) -> None:
        self._tick()
        while True:
            await asyncio.sleep(self._interval)
            self._tick()

    def _tick(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Health check still in flight, skipping tick")
            return
        self._ensure_check()

    # -- Probing ---------------------------------------------------------------

    def _ensure_check(self) -> asyncio.Task[ConnectionStatus]:
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.get_running_loop().create_task(self._run_check())
        return self._inflight

    async def check_now(self) -> ConnectionStatus:
        """Check now, or join the check already in flight.  Returns the resulting status."""
        # Shielded so a cancelled caller does not abort a check others may be waiting on.
        return await asyncio.shield(self._ensure_check())

    async def _run_check(self) -> ConnectionStatus:
        self._checking = True
        version: str | None = None
        try:
            report = await self._service.check_health()
            status = report.status
            version = report.version
        except TransportError as exc:
            status = ConnectionStatus.ERROR if exc.structured else ConnectionStatus.DISCONNECTED
            logger.warning("Health check failed: {}", exc)
        except Exception as exc:
            status = ConnectionStatus.DISCONNECTED
            logger.warning("Health check failed unexpectedly: {!r}", exc)
        finally:
            self._checking = False

        if self._stopped:
            logger.debug("Discarding health result from a stopped monitor")
            return self._status

        self._version = version
        self._last_checked = datetime.now(UTC)
        self._set_status(status)
        return status
