"""PushRegistration aggregate (CQRS) — the device push token held for a user.

One registration exists per user profile. Saving a token overwrites the
previous one (last write wins); signing out clears it.
"""

from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.registration.events import (
    PushRegistrationProvisioned,
    PushTokenCleared,
    PushTokenRegistered,
)
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String


class UserRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    PICKER = "picker"
    COURIER = "courier"


@notifications.aggregate
class PushRegistration:
    """Push token slot attached to a user profile."""

    user_id: Identifier(required=True, unique=True)
    role: String(choices=UserRole, default=UserRole.CUSTOMER.value)
    device_token: String(max_length=255)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def provision(cls, user_id, role=UserRole.CUSTOMER.value):
        """Create an empty registration for a newly provisioned profile."""
        now = datetime.now(UTC)
        registration = cls(
            user_id=user_id,
            role=role,
            created_at=now,
            updated_at=now,
        )
        registration.raise_(
            PushRegistrationProvisioned(
                registration_id=str(registration.id),
                user_id=str(user_id),
                role=role,
                provisioned_at=now,
            )
        )
        return registration

    @property
    def has_token(self) -> bool:
        return bool(self.device_token)

    def register_token(self, device_token: str) -> None:
        """Store ``device_token``, replacing the current one."""
        if not device_token:
            raise ValidationError({"device_token": ["A push token is required"]})

        now = datetime.now(UTC)
        self.device_token = device_token
        self.updated_at = now
        self.raise_(
            PushTokenRegistered(
                registration_id=str(self.id),
                user_id=str(self.user_id),
                registered_at=now,
            )
        )

    def clear_token(self) -> None:
        now = datetime.now(UTC)
        self.device_token = None
        self.updated_at = now
        self.raise_(
            PushTokenCleared(
                registration_id=str(self.id),
                user_id=str(self.user_id),
                cleared_at=now,
            )
        )
