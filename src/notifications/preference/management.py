"""Preference management command + handler."""

from notifications.domain import notifications
from notifications.preference.preference import NotificationPreference
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="NotificationPreference")
class UpdateNotificationPreferences:
    """Change which notifications a user receives."""

    user_id: Identifier(required=True)
    push_notifications: Boolean()
    order_status_updates: Boolean()
    order_confirmations: Boolean()
    delivery_notifications: Boolean()
    promotional_offers: Boolean()


def find_preference(user_id: str) -> NotificationPreference | None:
    repo = current_domain.repository_for(NotificationPreference)
    prefs = repo._dao.query.filter(user_id=str(user_id)).all().items
    return prefs[0] if prefs else None


@notifications.command_handler(part_of=NotificationPreference)
class ManagePreferencesHandler:
    @handle(UpdateNotificationPreferences)
    def update_preferences(self, command: UpdateNotificationPreferences):
        preference = find_preference(command.user_id)
        if preference is None:
            raise ObjectNotFoundError(f"No preferences for user {command.user_id}")
        preference.update(
            push_notifications=command.push_notifications,
            order_status_updates=command.order_status_updates,
            order_confirmations=command.order_confirmations,
            delivery_notifications=command.delivery_notifications,
            promotional_offers=command.promotional_offers,
        )
        current_domain.repository_for(NotificationPreference).add(preference)
