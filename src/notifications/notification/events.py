"""Domain events for the Notification aggregate."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, String


@notifications.event(part_of="Notification")
class NotificationCreated:
    """A notification row was created and is pending delivery."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    notification_type: String(required=True)
    title: String(required=True)
    created_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationSent:
    """The push channel accepted the notification."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    sent_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationFailed:
    """The push channel rejected the notification. Failed rows are not resubmitted automatically."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    reason: String(required=True)
    failed_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationRead:
    """The user opened or acknowledged the notification."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    read_at: DateTime(required=True)
