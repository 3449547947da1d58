"""Domain events for the NotificationPreference aggregate."""

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Identifier


@notifications.event(part_of="NotificationPreference")
class PreferencesCreated:
    """Default notification preferences were created for a new user."""

    __version__ = "v1"

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    push_notifications: Boolean(required=True)
    created_at: DateTime(required=True)


@notifications.event(part_of="NotificationPreference")
class PreferencesUpdated:
    """A user changed which notifications they receive."""

    __version__ = "v1"

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    push_notifications: Boolean(required=True)
    order_status_updates: Boolean(required=True)
    order_confirmations: Boolean(required=True)
    delivery_notifications: Boolean(required=True)
    promotional_offers: Boolean(required=True)
    updated_at: DateTime(required=True)
