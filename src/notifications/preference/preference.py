"""NotificationPreference aggregate (CQRS) — which pushes a user wants to receive.

A master ``push_notifications`` switch plus one flag per notification family.
Types without a dedicated flag are governed by the master switch alone.
"""

from datetime import UTC, datetime

from notifications.domain import notifications
from notifications.notification.notification import NotificationType
from notifications.preference.events import PreferencesCreated, PreferencesUpdated
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier

# Notification type → preference flag that must be on for it to be created
_TYPE_FLAGS = {
    NotificationType.ORDER_STATUS.value: "order_status_updates",
    NotificationType.ORDER_CREATED.value: "order_confirmations",
    NotificationType.DELIVERY.value: "delivery_notifications",
    NotificationType.PROMOTIONAL.value: "promotional_offers",
}

PREFERENCE_FLAGS = (
    "push_notifications",
    "order_status_updates",
    "order_confirmations",
    "delivery_notifications",
    "promotional_offers",
)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class NotificationPreference:
    """A user's push notification preferences."""

    user_id: Identifier(required=True, unique=True)

    push_notifications: Boolean(default=True)
    order_status_updates: Boolean(default=True)
    order_confirmations: Boolean(default=True)
    delivery_notifications: Boolean(default=True)
    promotional_offers: Boolean(default=False)

    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create_default(cls, user_id):
        """Everything on except promotional offers."""
        now = datetime.now(UTC)

        preference = cls(
            user_id=user_id,
            push_notifications=True,
            order_status_updates=True,
            order_confirmations=True,
            delivery_notifications=True,
            promotional_offers=False,
            created_at=now,
            updated_at=now,
        )

        preference.raise_(
            PreferencesCreated(
                preference_id=str(preference.id),
                user_id=str(user_id),
                push_notifications=True,
                created_at=now,
            )
        )

        return preference

    def allows(self, notification_type: str) -> bool:
        if not self.push_notifications:
            return False
        flag = _TYPE_FLAGS.get(notification_type)
        return flag is None or bool(getattr(self, flag))

    def update(self, **flags):
        """Update preference flags. Flags passed as None keep their value."""
        unknown = set(flags) - set(PREFERENCE_FLAGS)
        if unknown:
            raise ValidationError({"preferences": [f"Unknown preference: {', '.join(sorted(unknown))}"]})
        changes = {name: value for name, value in flags.items() if value is not None}
        if not changes:
            raise ValidationError({"preferences": ["At least one preference must be provided"]})

        now = datetime.now(UTC)
        for name, value in changes.items():
            setattr(self, name, value)
        self.updated_at = now

        self.raise_(
            PreferencesUpdated(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                push_notifications=self.push_notifications,
                order_status_updates=self.order_status_updates,
                order_confirmations=self.order_confirmations,
                delivery_notifications=self.delivery_notifications,
                promotional_offers=self.promotional_offers,
                updated_at=now,
            )
        )
