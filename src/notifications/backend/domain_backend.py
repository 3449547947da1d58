"""In-process notification backend backed by the Notifications domain."""

import structlog
from notifications.backend.port import NotificationBackendPort, NotificationRecord
from notifications.domain import notifications
from notifications.notification.delivery import DeliverPendingNotifications, count_pending
from notifications.notification.notification import Notification
from notifications.notification.read import MarkNotificationRead
from notifications.registration.management import ClearPushToken, SavePushToken
from protean.domain import Domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


def to_record(notification: Notification) -> NotificationRecord:
    return NotificationRecord(
        id=str(notification.id),
        user_id=str(notification.user_id),
        title=notification.title,
        body=notification.body,
        notification_type=notification.notification_type,
        status=notification.status,
        created_at=notification.created_at,
        read_at=notification.read_at,
        data=notification.payload(),
    )


def query_user_notifications(user_id: str, limit: int) -> list[Notification]:
    """The user's notifications, newest first, from the active domain's repository."""
    repo = current_domain.repository_for(Notification)
    return repo._dao.query.filter(user_id=str(user_id)).order_by("-created_at").limit(limit).all().items


class DomainNotificationBackend(NotificationBackendPort):
    """Runs backend operations as commands on the Notifications domain.

    ``actor_id`` is the authenticated user of the session; token writes for
    anybody else are refused by the row-level ownership check.
    """

    def __init__(self, domain: Domain = notifications, actor_id: str | None = None):
        self.domain = domain
        self.actor_id = actor_id

    async def save_push_token(self, user_id: str, token: str) -> bool:
        with self.domain.domain_context():
            try:
                updated = self.domain.process(
                    SavePushToken(user_id=user_id, device_token=token, actor_id=self.actor_id or user_id),
                    asynchronous=False,
                )
            except InvalidOperationError as exc:
                logger.warning("Push token write refused", user_id=user_id, error=str(exc))
                return False
        return bool(updated)

    async def clear_push_token(self, user_id: str) -> bool:
        with self.domain.domain_context():
            try:
                updated = self.domain.process(
                    ClearPushToken(user_id=user_id, actor_id=self.actor_id or user_id),
                    asynchronous=False,
                )
            except InvalidOperationError as exc:
                logger.warning("Push token clear refused", user_id=user_id, error=str(exc))
                return False
        return bool(updated)

    async def get_user_notifications(self, user_id: str, limit: int = 50) -> list[NotificationRecord]:
        with self.domain.domain_context():
            return [to_record(notification) for notification in query_user_notifications(user_id, limit)]

    async def mark_notification_read(self, notification_id: str) -> bool:
        with self.domain.domain_context():
            try:
                return bool(
                    self.domain.process(
                        MarkNotificationRead(notification_id=notification_id, user_id=self.actor_id),
                        asynchronous=False,
                    )
                )
            except (ObjectNotFoundError, InvalidOperationError, ValidationError) as exc:
                logger.warning("Mark read refused", notification_id=notification_id, error=str(exc))
                return False

    async def count_pending(self) -> int:
        with self.domain.domain_context():
            return count_pending()

    async def trigger_delivery(self) -> dict:
        with self.domain.domain_context():
            return self.domain.process(DeliverPendingNotifications(), asynchronous=False)
