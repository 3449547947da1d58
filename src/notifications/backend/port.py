"""Notification backend port (abstract interface).

Defines the contract the client-side components (token registrar, dispatch
coordinator, inbox) use to talk to the notification backend.
``DomainNotificationBackend`` fulfils it in-process; tests swap in fakes
that simulate propagation lag and network failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


class BackendUnavailableError(Exception):
    """The backend could not be reached. Callers surface this as a network error."""


@dataclass(frozen=True)
class NotificationRecord:
    """A notification as the inbox sees it."""

    id: str
    user_id: str
    title: str
    body: str
    notification_type: str
    status: str
    created_at: datetime | None = None
    read_at: datetime | None = None
    data: dict = field(default_factory=dict)

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def order_id(self) -> str | None:
        return self.data.get("orderId")


class NotificationBackendPort(ABC):
    @abstractmethod
    async def save_push_token(self, user_id: str, token: str) -> bool:
        """Store the token on the user's profile. False when no row was updated or the write was refused."""
        ...

    @abstractmethod
    async def clear_push_token(self, user_id: str) -> bool: ...

    @abstractmethod
    async def get_user_notifications(self, user_id: str, limit: int = 50) -> list[NotificationRecord]:
        """Newest first."""
        ...

    @abstractmethod
    async def mark_notification_read(self, notification_id: str) -> bool: ...

    @abstractmethod
    async def count_pending(self) -> int: ...

    @abstractmethod
    async def trigger_delivery(self) -> dict:
        """Ask the backend to deliver pending notifications.

        Returns:
            {"sent": int, "failed": int, "total": int}
        """
        ...
