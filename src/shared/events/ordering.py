"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape for consumption by other domains (the
Notifications domain turns them into push notification rows). They are
registered as external events via domain.register_external_event() with
matching __type__ strings so Protean's stream deserialization works
correctly.

The source-of-truth events are in src/ordering/order/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, Integer, String


class OrderPlaced(BaseEvent):
    """A customer placed a new order at checkout."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    payment_method = String(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


class OrderStatusChanged(BaseEvent):
    """An order moved to a new status through the atomic status procedure."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    actor_role = String(required=True)
    actor_id = Identifier()
    changed_at = DateTime(required=True)
