"""Domain events for the DeliverySettings aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="DeliverySettings")
class WorkingHoursConfigured:
    """A new working-hours window became the active delivery setting."""

    __version__ = "v1"

    settings_id = Identifier(required=True)
    working_hours_start = String(required=True)
    working_hours_end = String(required=True)
    is_working_hours_enabled = Boolean(required=True)
    configured_at = DateTime(required=True)
