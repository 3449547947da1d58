"""Notification aggregate (CQRS) — one push notification addressed to a user.

Rows are created from Ordering events (and promotional campaigns), delivered
in batches through the push channel adapter, and marked read from the user's
inbox. Delivery state and read state are independent of each other.

State Machine:
    PENDING → SENT
    PENDING → FAILED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRead,
    NotificationSent,
)
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_CREATED = "order_created"
    ORDER_STATUS = "order_status"
    DELIVERY = "delivery"
    PROMOTIONAL = "promotional"
    COUPON = "coupon"
    REMINDER = "reminder"
    WELCOME = "welcome"
    ACHIEVEMENT = "achievement"


class NotificationStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {
        NotificationStatus.SENT,
        NotificationStatus.FAILED,
    },
    NotificationStatus.SENT: set(),  # Terminal
    NotificationStatus.FAILED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class Notification:
    """A single push notification addressed to a user."""

    # Recipient
    user_id: Identifier(required=True)

    # Content
    notification_type: String(choices=NotificationType, required=True)
    title: String(required=True, max_length=200)
    body: Text(required=True)
    data: Text()  # JSON payload, may carry orderId

    # Delivery
    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    push_token: String(max_length=255)  # Token captured when the row was created
    failure_reason: String(max_length=500)
    sent_at: DateTime()

    # Read state
    read_at: DateTime()

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id, notification_type, title, body, data=None, push_token=None):
        """Create a new notification in PENDING status."""
        now = datetime.now(UTC)

        notification = cls(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            body=body,
            data=json.dumps(data or {}),
            push_token=push_token,
            status=NotificationStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                notification_type=notification_type,
                title=title,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def payload(self) -> dict:
        return json.loads(self.data) if self.data else {}

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self, sent_at=None):
        """Mark notification as accepted by the push channel."""
        self._assert_can_transition(NotificationStatus.SENT)

        now = sent_at or datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        """Mark notification as failed."""
        self._assert_can_transition(NotificationStatus.FAILED)

        now = datetime.now(UTC)
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                reason=reason,
                failed_at=now,
            )
        )

    def mark_read(self, read_at=None) -> bool:
        """Record that the user read the notification. Returns False if it was already read."""
        if self.read_at is not None:
            return False

        now = read_at or datetime.now(UTC)
        self.read_at = now
        self.updated_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                read_at=now,
            )
        )
        return True
