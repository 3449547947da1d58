"""Inbound cross-domain event handler — Preferences reacts to profile provisioning.

Listens for ProfileProvisioned to create default notification preferences.
"""

import structlog
from notifications.domain import notifications
from notifications.preference.management import find_preference
from notifications.preference.preference import NotificationPreference
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.identity import ProfileProvisioned

logger = structlog.get_logger(__name__)

notifications.register_external_event(ProfileProvisioned, "Identity.ProfileProvisioned.v1")


@notifications.event_handler(part_of=NotificationPreference, stream_category="identity::profile")
class PreferenceIdentityEventsHandler:
    """Creates default notification preferences when a profile is provisioned."""

    @handle(ProfileProvisioned)
    def on_profile_provisioned(self, event: ProfileProvisioned) -> None:
        if find_preference(str(event.user_id)) is not None:
            logger.info("Preferences already exist for user", user_id=str(event.user_id))
            return

        preference = NotificationPreference.create_default(user_id=str(event.user_id))
        current_domain.repository_for(NotificationPreference).add(preference)

        logger.info(
            "Default preferences created for new user",
            user_id=str(event.user_id),
            preference_id=str(preference.id),
        )
