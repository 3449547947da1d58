"""Notification client — wires registrar, coordinator and inbox to a signed-in user.

Mirrors the app-level provider: signing in registers the push token, loads
the inbox, attaches the device listeners and starts periodic dispatch;
signing out undoes all of it in reverse order.
"""

from collections.abc import Callable

import structlog
from notifications.backend.port import NotificationBackendPort
from notifications.client.dispatch import NotificationDispatchCoordinator
from notifications.client.inbox import NotificationInbox
from notifications.client.registrar import PushTokenRegistrar
from notifications.device.port import DevicePort
from shared.result import Result

logger = structlog.get_logger(__name__)


class NotificationClient:
    def __init__(
        self,
        backend: NotificationBackendPort,
        device: DevicePort,
        registrar: PushTokenRegistrar | None = None,
        coordinator: NotificationDispatchCoordinator | None = None,
        on_open: Callable[[str, dict], None] | None = None,
        dispatch_interval: float | None = None,
    ):
        self.backend = backend
        self.device = device
        self.registrar = registrar or PushTokenRegistrar(device, backend)
        self.coordinator = coordinator or NotificationDispatchCoordinator(backend)
        self.on_open = on_open
        self.dispatch_interval = dispatch_interval
        self.user_id: str | None = None
        self.inbox: NotificationInbox | None = None
        self._detach: Callable[[], None] | None = None

    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    async def sign_in(self, user_id: str) -> Result:
        """Set up notifications for ``user_id``. Returns the registrar's result.

        A failed token registration does not stop the inbox from loading; the
        user still sees their history without push.
        """
        if self.signed_in:
            await self.sign_out()

        registration = await self.registrar.register_for_user(user_id)
        if not registration.ok:
            logger.warning("Signed in without push", user_id=user_id, reason=registration.error.kind.value)

        self.user_id = user_id
        self.inbox = NotificationInbox(self.backend, self.device, user_id, on_open=self.on_open)
        await self.inbox.load()
        self._detach = self.inbox.attach()
        self.coordinator.start_auto_processing(self.dispatch_interval)
        logger.info("Notification client started", user_id=user_id)
        return registration

    async def sign_out(self) -> None:
        if not self.signed_in:
            return

        self.coordinator.stop_auto_processing()
        if self._detach is not None:
            self._detach()
            self._detach = None

        result = await self.registrar.unregister(self.user_id)
        if not result.ok:
            logger.warning("Push token not cleared", user_id=self.user_id, error=result.error.message)

        logger.info("Notification client stopped", user_id=self.user_id)
        self.user_id = None
        self.inbox = None
