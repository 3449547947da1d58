"""Device port — the handset's notification subsystem.

Acquiring a push token, the app icon badge, banner dismissal and the two
notification listeners (received while in the foreground, tapped by the
user) all live on the device, outside this codebase.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from notifications.device.listeners import Subscription


class DevicePort(ABC):
    @abstractmethod
    async def get_push_token(self) -> str | None:
        """Return the device push token, or None when it cannot be obtained (permission denied, emulator)."""
        ...

    @abstractmethod
    async def set_badge_count(self, count: int) -> None: ...

    @abstractmethod
    async def dismiss_all(self) -> None:
        """Dismiss every notification banner currently shown."""
        ...

    @abstractmethod
    def add_received_listener(self, listener: Callable[[dict], None]) -> Subscription:
        """Called with the notification payload when one arrives while the app is open."""
        ...

    @abstractmethod
    def add_response_listener(self, listener: Callable[[dict], None]) -> Subscription:
        """Called with the notification payload when the user taps a notification."""
        ...
