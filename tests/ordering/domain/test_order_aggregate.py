"""Tests for Order aggregate creation, line items and raised events."""

from datetime import UTC, datetime

import pytest
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import ActorRole, Order, OrderStatus
from protean.exceptions import ValidationError

_ITEMS = [
    {"product_id": "prod-001", "name": "Milk", "unit_price": 1.5, "quantity": 2},
    {"product_id": "prod-002", "name": "Bread", "unit_price": 2.0, "quantity": 1, "image_ref": "bread.png"},
    {"product_id": "prod-003", "name": "Eggs", "unit_price": 3.25, "quantity": 12},
]


def _create(**overrides):
    defaults = {
        "customer_id": "cust-001",
        "items_data": _ITEMS,
        "total_amount": 44.0,
        "payment_method": "cash",
    }
    defaults.update(overrides)
    return Order.create(**defaults)


class TestOrderCreation:
    def test_starts_pending(self):
        order = _create()
        assert order.status == OrderStatus.PENDING.value
        assert order.current_status == OrderStatus.PENDING

    def test_items_keep_cart_order(self):
        order = _create()
        assert [item.name for item in order.line_items()] == ["Milk", "Bread", "Eggs"]
        assert [item.position for item in order.line_items()] == [0, 1, 2]

    def test_item_fields(self):
        bread = _create().line_items()[1]
        assert bread.unit_price == 2.0
        assert bread.quantity == 1
        assert bread.image_ref == "bread.png"

    def test_shipping_address(self):
        order = _create(shipping_address={"address": "Main St 1", "latitude": 41.0, "longitude": 29.0})
        assert order.shipping_address.address == "Main St 1"
        assert order.shipping_address.latitude == 41.0

    def test_address_is_optional(self):
        assert _create().shipping_address is None

    def test_placed_at_sets_timestamps(self):
        placed_at = datetime(2024, 5, 1, 10, 30, tzinfo=UTC)
        order = _create(placed_at=placed_at)
        assert order.created_at == placed_at
        assert order.updated_at == placed_at

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _create(items_data=[])
        assert "items" in exc.value.messages

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _create(items_data=[{"product_id": "p", "name": "Milk", "unit_price": 1.0, "quantity": 0}])

    def test_unknown_payment_method_rejected(self):
        with pytest.raises(ValidationError):
            _create(payment_method="bitcoin")


class TestOrderEvents:
    def test_creation_raises_order_placed(self):
        order = _create()
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == str(order.id)
        assert event.customer_id == "cust-001"
        assert event.item_count == 3
        assert event.payment_method == "cash"

    def test_transition_raises_status_changed(self):
        order = _create()
        order._events.clear()
        order.advance_to(OrderStatus.PREPARING, ActorRole.PICKER, actor_id="picker-1")

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "preparing"
        assert event.actor_role == "picker"
        assert event.actor_id == "picker-1"
        assert event.customer_id == "cust-001"

    def test_event_versions(self):
        assert OrderPlaced.__version__ == "v1"
        assert OrderStatusChanged.__version__ == "v1"
