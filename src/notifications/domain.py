"""Notifications bounded context — push registration, notification rows and delivery.

Consumes Ordering events to create push notification rows for customers,
keeps one push registration per user, delivers pending rows through the push
channel adapter, and hosts the client-side components (token registrar,
dispatch coordinator, inbox) that talk to this backend through async ports.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)


def custom_setting(key, default):
    """Read a value from the domain's ``[custom]`` configuration table."""
    custom = notifications.config.get("custom") or {}
    return custom.get(key, default)
