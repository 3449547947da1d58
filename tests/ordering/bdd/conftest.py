"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import ActorRole, Order, OrderStatus
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
}

# Role used to walk an order forward to each status in Given steps
_WALK = [
    (OrderStatus.PREPARING, ActorRole.PICKER),
    (OrderStatus.PREPARED, ActorRole.PICKER),
    (OrderStatus.SHIPPING, ActorRole.COURIER),
    (OrderStatus.DELIVERED, ActorRole.COURIER),
]


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order():
    order = Order.create(
        customer_id="cust-bdd",
        items_data=[{"product_id": "prod-001", "name": "Milk", "unit_price": 1.5, "quantity": 1}],
        total_amount=1.5,
        payment_method="card",
    )
    order._events.clear()
    return order


@given(parsers.cfparse('the order has reached "{status}"'), target_fixture="order")
def order_at_status(order, status):
    for step, role in _WALK:
        if order.status == status:
            break
        order.advance_to(step, role)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def order_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"
