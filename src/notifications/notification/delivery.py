"""Backend delivery job — flushes pending notifications to the push channel.

This is the delivery system of record: the client-side dispatch coordinator
only asks for a run. Each run picks up to ``batch_size`` pending rows, oldest
first, sends them through the push adapter and marks every row sent or failed.
Failed rows stay failed; nothing here resubmits them.
"""

import structlog
from notifications.channel import get_push_channel
from notifications.domain import custom_setting, notifications
from notifications.notification.notification import Notification, NotificationStatus
from protean.fields import Integer
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 100


@notifications.command(part_of="Notification")
class DeliverPendingNotifications:
    """Send every pending notification (up to ``batch_size``)."""

    batch_size: Integer(min_value=1)


def count_pending() -> int:
    repo = current_domain.repository_for(Notification)
    return repo._dao.query.filter(status=NotificationStatus.PENDING.value).all().total


def deliver_pending_notifications(batch_size: int | None = None) -> dict:
    """Deliver pending notifications.

    Returns:
        {"sent": int, "failed": int, "total": int}
    """
    batch_size = batch_size or custom_setting("DELIVERY_BATCH_SIZE", DEFAULT_BATCH_SIZE)
    repo = current_domain.repository_for(Notification)
    pending = (
        repo._dao.query.filter(status=NotificationStatus.PENDING.value)
        .order_by("created_at")
        .limit(batch_size)
        .all()
        .items
    )

    sent = failed = 0
    deliverable = []
    for notification in pending:
        if notification.push_token:
            deliverable.append(notification)
        else:
            notification.mark_failed("No push token")
            repo.add(notification)
            failed += 1

    if deliverable:
        adapter = get_push_channel()
        results = adapter.send_many(
            [
                {
                    "device_token": notification.push_token,
                    "title": notification.title,
                    "body": notification.body,
                    "data": notification.payload(),
                }
                for notification in deliverable
            ]
        )
        for notification, result in zip(deliverable, results, strict=True):
            if result.get("status") == "sent":
                notification.mark_sent()
                sent += 1
            else:
                notification.mark_failed(result.get("error", "Unknown dispatch error"))
                failed += 1
            repo.add(notification)

    total = len(pending)
    logger.info("Pending notifications delivered", sent=sent, failed=failed, total=total)
    return {"sent": sent, "failed": failed, "total": total}


@notifications.command_handler(part_of=Notification)
class DeliveryHandler:
    @handle(DeliverPendingNotifications)
    def deliver(self, command: DeliverPendingNotifications) -> dict:
        return deliver_pending_notifications(command.batch_size)
