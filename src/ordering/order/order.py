"""Order aggregate (CQRS) — the core of the ordering domain.

The Order is the authoritative record a customer creates at checkout. Its
status only ever moves forward one step at a time, and each step is gated by
the role of the actor asking for it. Cancellation is the single exception: an
admin may cancel from any non-terminal status.

State Machine:
    PENDING → PREPARING → PREPARED → SHIPPING → DELIVERED
    {PENDING, PREPARING, PREPARED, SHIPPING} → CANCELLED

Role gates:
    PENDING   → PREPARING   admin, picker
    PREPARING → PREPARED    picker (after item verification passes)
    PREPARED  → SHIPPING    admin, courier
    SHIPPING  → DELIVERED   admin, courier
    *         → CANCELLED   admin
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    PREPARED = "prepared"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ActorRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    PICKER = "picker"
    COURIER = "courier"


class PaymentMethod(Enum):
    CARD = "card"
    CASH = "cash"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

_FORWARD_EDGES = {
    (OrderStatus.PENDING, OrderStatus.PREPARING): frozenset({ActorRole.ADMIN, ActorRole.PICKER}),
    (OrderStatus.PREPARING, OrderStatus.PREPARED): frozenset({ActorRole.PICKER}),
    (OrderStatus.PREPARED, OrderStatus.SHIPPING): frozenset({ActorRole.ADMIN, ActorRole.COURIER}),
    (OrderStatus.SHIPPING, OrderStatus.DELIVERED): frozenset({ActorRole.ADMIN, ActorRole.COURIER}),
}

_CANCELLATION_ROLES = frozenset({ActorRole.ADMIN})

_VALID_TRANSITIONS = {
    status: (
        set()
        if status in _TERMINAL_STATES
        else {to for (frm, to) in _FORWARD_EDGES if frm == status} | {OrderStatus.CANCELLED}
    )
    for status in OrderStatus
}


def allowed_roles(from_status: OrderStatus, to_status: OrderStatus) -> frozenset:
    """Roles permitted to move an order along the given edge (empty when the edge does not exist)."""
    if to_status not in _VALID_TRANSITIONS[from_status]:
        return frozenset()
    if to_status == OrderStatus.CANCELLED:
        return _CANCELLATION_ROLES
    return _FORWARD_EDGES[(from_status, to_status)]


def is_legal_transition(from_status: OrderStatus, to_status: OrderStatus, role: ActorRole) -> bool:
    return role in allowed_roles(from_status, to_status)


def is_terminal(status: OrderStatus) -> bool:
    return status in _TERMINAL_STATES


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout; never changes afterwards."""

    address = String(required=True, max_length=500)
    address_details = String(max_length=500)
    latitude = Float()
    longitude = Float()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A single line item. ``position`` preserves the order the customer added items in."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_ref = String(max_length=1000)
    position = Integer(required=True, min_value=0)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_address = ValueObject(ShippingAddress)
    delivery_note = String(max_length=1000)
    status_updated_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_id: str,
        items_data: list[dict],
        total_amount: float,
        payment_method: str,
        shipping_address: dict | None = None,
        delivery_note: str | None = None,
        placed_at: datetime | None = None,
    ):
        """Create a new order in PENDING status."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = placed_at or datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            payment_method=payment_method,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            delivery_note=delivery_note,
            created_at=now,
            updated_at=now,
        )
        for position, item_data in enumerate(items_data):
            order.add_items(OrderItem(position=position, **item_data))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                total_amount=total_amount,
                payment_method=payment_method,
                item_count=len(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_items(self) -> list:
        """Items in the order the customer added them."""
        return sorted(self.items, key=lambda item: item.position)

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def advance_to(self, target_status, actor_role, actor_id: str | None = None) -> None:
        """Move the order to ``target_status`` on behalf of an actor with ``actor_role``."""
        try:
            target = OrderStatus(target_status)
            role = ActorRole(actor_role)
        except ValueError as exc:
            raise ValidationError({"status": [str(exc)]}) from None

        current = self.current_status
        if not is_legal_transition(current, target, role):
            raise ValidationError(
                {"status": [f"Cannot transition from {current.value} to {target.value} as {role.value}"]}
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.status_updated_by = actor_id
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                previous_status=current.value,
                new_status=target.value,
                actor_role=role.value,
                actor_id=actor_id,
                changed_at=now,
            )
        )
