"""Inbound cross-domain event handler — Registrations react to profile provisioning.

Listens for ProfileProvisioned to create the user's empty push registration,
which is what makes a later token save affect a row.
"""

import structlog
from notifications.domain import notifications
from notifications.registration.management import find_registration
from notifications.registration.registration import PushRegistration
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.identity import ProfileProvisioned

logger = structlog.get_logger(__name__)

notifications.register_external_event(ProfileProvisioned, "Identity.ProfileProvisioned.v1")


@notifications.event_handler(part_of=PushRegistration, stream_category="identity::profile")
class RegistrationIdentityEventsHandler:
    """Provisions a push registration for every new profile."""

    @handle(ProfileProvisioned)
    def on_profile_provisioned(self, event: ProfileProvisioned) -> None:
        if find_registration(str(event.user_id)) is not None:
            logger.info("Registration already exists for user", user_id=str(event.user_id))
            return

        registration = PushRegistration.provision(user_id=str(event.user_id), role=event.role or "customer")
        current_domain.repository_for(PushRegistration).add(registration)

        logger.info(
            "Push registration provisioned",
            user_id=str(event.user_id),
            registration_id=str(registration.id),
        )
