"""Working-hours monitoring and alert rate limiting.

``WorkingHoursMonitor`` re-evaluates the window once a minute and whenever the
display language changes. When the service is closed it asks the
``WorkingHoursAlertGate`` whether the out-of-hours alert may be shown; the gate
allows it at most once per cooldown window, tracked through a persisted
timestamp.
"""

import asyncio
import contextlib
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from ordering.domain import custom_setting
from ordering.store.port import OrderStorePort, StoreUnavailableError
from ordering.working_hours.policy import DEFAULT_LANGUAGE, WorkingHoursStatus, evaluate
from shared.storage import LocalStore

logger = structlog.get_logger(__name__)

ALERT_STORAGE_KEY = "working_hours_alert_shown"
DEFAULT_ALERT_COOLDOWN = timedelta(hours=4)
DEFAULT_REFRESH_INTERVAL = 60.0


class WorkingHoursAlertGate:
    """Allows the out-of-hours alert at most once per ``cooldown``."""

    def __init__(
        self,
        storage: LocalStore,
        cooldown: timedelta | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.storage = storage
        self.cooldown = cooldown or timedelta(
            hours=custom_setting("WORKING_HOURS_ALERT_COOLDOWN_HOURS", DEFAULT_ALERT_COOLDOWN.total_seconds() / 3600)
        )
        self._clock = clock

    def last_shown(self) -> datetime | None:
        record = self.storage.get(ALERT_STORAGE_KEY)
        if not record or "timestamp" not in record:
            return None
        return datetime.fromtimestamp(record["timestamp"], UTC)

    def should_show(self) -> bool:
        last = self.last_shown()
        if last is None:
            return True
        return self._clock() - last >= self.cooldown

    def mark_shown(self) -> None:
        self.storage.set(ALERT_STORAGE_KEY, {"timestamp": self._clock().timestamp()})

    def reset(self) -> None:
        self.storage.remove(ALERT_STORAGE_KEY)


class WorkingHoursMonitor:
    """Periodically evaluates the store's working-hours window for the current language."""

    def __init__(
        self,
        store: OrderStorePort,
        on_status: Callable[[WorkingHoursStatus], None] | None = None,
        alert_gate: WorkingHoursAlertGate | None = None,
        on_alert: Callable[[WorkingHoursStatus], None] | None = None,
        language: str = DEFAULT_LANGUAGE,
        interval: float | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.language = language
        self.interval = interval or custom_setting("WORKING_HOURS_REFRESH_SECONDS", DEFAULT_REFRESH_INTERVAL)
        self.alert_gate = alert_gate
        self._on_status = on_status
        self._on_alert = on_alert
        self._clock = clock
        self._task: asyncio.Task | None = None
        # Until the first evaluation the service is assumed open.
        self.status = WorkingHoursStatus(within_hours=True, message="", enabled=False, start="", end="")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> WorkingHoursStatus:
        """Fetch the active window and evaluate it now. Keeps the last status when the store is unreachable."""
        try:
            window = await self.store.get_working_hours_window()
        except StoreUnavailableError as exc:
            logger.warning("Working hours check failed", error=str(exc))
            return self.status

        status = evaluate(window, self._clock(), self.language)
        self.status = status
        if self._on_status is not None:
            self._on_status(status)

        if not status.within_hours and self._on_alert is not None and self.alert_gate is not None:
            if self.alert_gate.should_show():
                self._on_alert(status)
                self.alert_gate.mark_shown()
        return status

    async def set_language(self, language: str) -> WorkingHoursStatus:
        self.language = language
        return await self.check()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self.check()
            except Exception as exc:
                logger.error("Working hours callback failed", language=self.language, error=str(exc))
            await asyncio.sleep(self.interval)
