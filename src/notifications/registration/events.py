"""Domain events for the PushRegistration aggregate."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, String


@notifications.event(part_of="PushRegistration")
class PushRegistrationProvisioned:
    """A profile became resolvable and can now hold a push token."""

    __version__ = "v1"

    registration_id: Identifier(required=True)
    user_id: Identifier(required=True)
    role: String(required=True)
    provisioned_at: DateTime(required=True)


@notifications.event(part_of="PushRegistration")
class PushTokenRegistered:
    """A device push token was stored for the user, replacing any earlier one."""

    __version__ = "v1"

    registration_id: Identifier(required=True)
    user_id: Identifier(required=True)
    registered_at: DateTime(required=True)


@notifications.event(part_of="PushRegistration")
class PushTokenCleared:
    """The user's push token was removed on sign-out."""

    __version__ = "v1"

    registration_id: Identifier(required=True)
    user_id: Identifier(required=True)
    cleared_at: DateTime(required=True)
