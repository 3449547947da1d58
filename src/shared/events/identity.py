"""Cross-domain event contracts for profile provisioning.

Profiles are owned by the authentication backend, outside this codebase. When
a profile row becomes resolvable it announces itself with ProfileProvisioned,
which the Notifications domain uses to create the user's push registration
and default preferences.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class ProfileProvisioned(BaseEvent):
    """A user profile row was created and can now hold a push token."""

    __version__ = "v1"

    user_id = Identifier(required=True)
    role = String(default="customer")
    provisioned_at = DateTime(required=True)
