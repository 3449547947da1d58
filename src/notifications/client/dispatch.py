"""Notification dispatch coordinator — the client-side trigger for backend delivery.

The coordinator asks the backend to flush pending notifications, either on
demand or on a timer. At most one cycle runs at a time: a call made while a
cycle is in flight returns "Already processing" instead of queueing, and
calls closer together than ``min_interval`` return "Rate limited". The flag
guards this process only; the backend job protects itself against double
sends across devices.

There is no retry here. Rows the backend marks failed stay failed.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from notifications.backend.port import NotificationBackendPort
from notifications.domain import custom_setting

logger = structlog.get_logger(__name__)

ALREADY_PROCESSING = "Already processing"
RATE_LIMITED = "Rate limited"

DEFAULT_INTERVAL = 30.0
DEFAULT_MIN_INTERVAL = 5.0


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatch cycle."""

    success: bool
    sent: int = 0
    failed: int = 0
    total: int = 0
    error: str | None = None


class NotificationDispatchCoordinator:
    def __init__(
        self,
        backend: NotificationBackendPort,
        min_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.min_interval = (
            min_interval
            if min_interval is not None
            else custom_setting("DISPATCH_MIN_INTERVAL_SECONDS", DEFAULT_MIN_INTERVAL)
        )
        self._clock = clock
        self._processing = False
        self._last_started: float | None = None
        self._timer: asyncio.Task | None = None
        self._cycles: set[asyncio.Task] = set()

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def auto_processing(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # -------------------------------------------------------------------
    # Single cycle
    # -------------------------------------------------------------------
    async def process_pending_notifications(self) -> DispatchOutcome:
        """Run one dispatch cycle unless one is already running or the last one was too recent."""
        if self._processing:
            return DispatchOutcome(success=False, error=ALREADY_PROCESSING)

        now = self._clock()
        if self._last_started is not None and now - self._last_started < self.min_interval:
            return DispatchOutcome(success=False, error=RATE_LIMITED)

        self._processing = True
        self._last_started = now
        try:
            pending = await self.get_pending_count()
            if pending == 0:
                return DispatchOutcome(success=True)

            result = await self.backend.trigger_delivery()
            outcome = DispatchOutcome(
                success=True,
                sent=int(result.get("sent", 0)),
                failed=int(result.get("failed", 0)),
                total=int(result.get("total", pending)),
            )
            if outcome.sent or outcome.failed:
                logger.info("Dispatch cycle finished", sent=outcome.sent, failed=outcome.failed, total=outcome.total)
            return outcome
        except Exception as exc:
            logger.error("Dispatch cycle failed", error=str(exc))
            return DispatchOutcome(success=False, error=str(exc))
        finally:
            self._processing = False

    async def get_pending_count(self) -> int:
        """Number of pending notifications, or 0 when it cannot be read."""
        try:
            return await self.backend.count_pending()
        except Exception as exc:
            logger.warning("Pending count unavailable", error=str(exc))
            return 0

    # -------------------------------------------------------------------
    # Auto processing
    # -------------------------------------------------------------------
    def start_auto_processing(self, interval: float | None = None) -> None:
        """Run a cycle now and then every ``interval`` seconds. No-op when already running."""
        if self.auto_processing:
            return
        interval = interval or custom_setting("DISPATCH_INTERVAL_SECONDS", DEFAULT_INTERVAL)
        self._timer = asyncio.get_running_loop().create_task(self._tick(interval))
        logger.debug("Auto processing started", interval=interval)

    def stop_auto_processing(self) -> None:
        """Cancel future cycles. A cycle already in flight runs to completion."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Auto processing stopped")

    async def wait_idle(self) -> None:
        """Wait for every cycle started by the timer to finish."""
        while self._cycles:
            await asyncio.gather(*list(self._cycles))

    async def _tick(self, interval: float) -> None:
        while True:
            # Cycles run as their own tasks so cancelling the timer never aborts one mid-call
            cycle = asyncio.get_running_loop().create_task(self.process_pending_notifications())
            self._cycles.add(cycle)
            cycle.add_done_callback(self._cycles.discard)
            await asyncio.sleep(interval)
