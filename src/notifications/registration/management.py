"""Push token commands + handler — save on sign-in, clear on sign-out.

Both handlers report how many registrations they touched. Zero means the
profile is not resolvable yet, which callers treat as "not ready".
"""

import structlog
from notifications.domain import notifications
from notifications.registration.registration import PushRegistration
from protean.exceptions import InvalidOperationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="PushRegistration")
class SavePushToken:
    """Associate a device push token with a user."""

    user_id: Identifier(required=True)
    device_token: String(required=True, max_length=255)
    actor_id: Identifier()  # Authenticated user issuing the write


@notifications.command(part_of="PushRegistration")
class ClearPushToken:
    """Remove the user's push token."""

    user_id: Identifier(required=True)
    actor_id: Identifier()


def find_registration(user_id: str) -> PushRegistration | None:
    repo = current_domain.repository_for(PushRegistration)
    registrations = repo._dao.query.filter(user_id=str(user_id)).all().items
    return registrations[0] if registrations else None


def _assert_owner(command) -> None:
    """Row-level check: users may only write their own registration."""
    if command.actor_id and str(command.actor_id) != str(command.user_id):
        raise InvalidOperationError(f"User {command.actor_id} cannot modify the push token of {command.user_id}")


@notifications.command_handler(part_of=PushRegistration)
class PushTokenHandler:
    @handle(SavePushToken)
    def save_push_token(self, command: SavePushToken) -> int:
        _assert_owner(command)
        registration = find_registration(command.user_id)
        if registration is None:
            logger.info("No registration for user yet", user_id=str(command.user_id))
            return 0

        registration.register_token(command.device_token)
        current_domain.repository_for(PushRegistration).add(registration)
        return 1

    @handle(ClearPushToken)
    def clear_push_token(self, command: ClearPushToken) -> int:
        _assert_owner(command)
        registration = find_registration(command.user_id)
        if registration is None or not registration.has_token:
            return 0

        registration.clear_token()
        current_domain.repository_for(PushRegistration).add(registration)
        return 1
