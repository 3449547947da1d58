"""Ordering bounded context — Order lifecycle, picker verification and working hours.

Holds the authoritative Order records and the atomic status procedure that
advances them through the role-gated lifecycle, the delivery settings that
define the working-hours window, and the client-side components (lifecycle
controller, order feeds, picker workbench, working-hours monitor) that talk
to the store through an async port.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)


def custom_setting(key, default):
    """Read a value from the domain's ``[custom]`` configuration table."""
    custom = ordering.config.get("custom") or {}
    return custom.get(key, default)
