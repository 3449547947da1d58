"""Notification inbox — read/unread state and the device badge.

The in-memory list is replaced wholesale on every load, and the unread count
is re-derived from it (entries without ``read_at``). Between loads the count
only goes down: marking an entry read decrements it (never below zero) and
``clear_all`` zeroes it.

The device badge is a projection of that count. The inbox remembers the last
value the device accepted and pushes whenever the count differs from it, so
the first load always syncs a stale badge and a failed write is retried on
the next change or load. ``clear_all`` always pushes zero.

Marking an entry read is optimistic. The local entry flips immediately and
stays flipped even if the backend call fails afterwards.
"""

import asyncio
import dataclasses
from collections.abc import Callable
from datetime import datetime, timezone

import structlog
from notifications.backend.port import BackendUnavailableError, NotificationBackendPort, NotificationRecord
from notifications.device.port import DevicePort
from notifications.domain import custom_setting
from shared.result import Err, Ok, Result

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 50


class NotificationInbox:
    def __init__(
        self,
        backend: NotificationBackendPort,
        device: DevicePort,
        user_id: str,
        limit: int | None = None,
        on_open: Callable[[str, dict], None] | None = None,
    ):
        self.backend = backend
        self.device = device
        self.user_id = user_id
        self.limit = limit or custom_setting("INBOX_LIMIT", DEFAULT_LIMIT)
        self.on_open = on_open
        self.entries: list[NotificationRecord] = []
        self.unread_count = 0
        self._badge: int | None = None
        self._reload_tasks: set[asyncio.Task] = set()

    async def load(self) -> Result:
        """Replace the list with the user's latest notifications."""
        try:
            entries = await self.backend.get_user_notifications(self.user_id, self.limit)
        except BackendUnavailableError as exc:
            logger.warning("Inbox load failed", user_id=self.user_id, error=str(exc))
            return Err(str(exc))

        self.entries = list(entries)
        await self._set_unread(sum(1 for entry in self.entries if not entry.is_read))
        return Ok(self.entries)

    async def mark_read(self, notification_id: str) -> bool:
        """Flip an entry to read. Returns False when it is unknown or already read."""
        index = next((i for i, entry in enumerate(self.entries) if entry.id == str(notification_id)), None)
        if index is None or self.entries[index].is_read:
            return False

        self.entries[index] = dataclasses.replace(self.entries[index], read_at=datetime.now(timezone.utc))
        await self._set_unread(max(0, self.unread_count - 1))

        try:
            confirmed = await self.backend.mark_notification_read(str(notification_id))
        except BackendUnavailableError as exc:
            logger.warning("Read marker not persisted", notification_id=str(notification_id), error=str(exc))
            return True

        if not confirmed:
            logger.warning("Read marker refused by backend", notification_id=str(notification_id))
        return True

    async def clear_all(self) -> None:
        """Dismiss banners on the device and zero the unread count. Server-side history is kept."""
        await self.device.dismiss_all()
        await self._set_unread(0, force=True)

    # -------------------------------------------------------------------
    # Badge
    # -------------------------------------------------------------------
    async def _set_unread(self, count: int, force: bool = False) -> None:
        self.unread_count = count
        if count == self._badge and not force:
            return
        try:
            await self.device.set_badge_count(count)
        except Exception as exc:
            logger.warning("Badge sync failed", user_id=self.user_id, count=count, error=str(exc))
            return
        self._badge = count

    # -------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------
    def attach(self) -> Callable[[], None]:
        """Wire foreground delivery and tap-through. Returns a disposer that removes both listeners."""
        received = self.device.add_received_listener(self._on_received)
        response = self.device.add_response_listener(self._on_response)

        def detach() -> None:
            received.remove()
            response.remove()

        return detach

    def _on_received(self, payload: dict) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Notification received outside an event loop", user_id=self.user_id)
            return
        task = loop.create_task(self.load())
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)

    def _on_response(self, payload: dict) -> None:
        data = (payload or {}).get("data") or {}
        order_id = data.get("orderId")
        if order_id and self.on_open is not None:
            self.on_open(str(order_id), data)

    async def wait_for_reload(self) -> None:
        """Wait until reloads triggered by received notifications have finished."""
        while self._reload_tasks:
            await asyncio.gather(*list(self._reload_tasks))
