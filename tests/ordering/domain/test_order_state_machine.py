"""Tests for Order state machine — role-gated transitions and invalid transition guards."""

import itertools

import pytest
from ordering.order.order import (
    ActorRole,
    Order,
    OrderStatus,
    allowed_roles,
    is_legal_transition,
    is_terminal,
)
from protean.exceptions import ValidationError


def _make_order():
    order = Order.create(
        customer_id="cust-001",
        items_data=[
            {"product_id": "prod-001", "name": "Milk", "unit_price": 1.5, "quantity": 2},
        ],
        total_amount=3.0,
        payment_method="card",
    )
    order._events.clear()
    return order


_PATH = [
    (OrderStatus.PREPARING, ActorRole.PICKER),
    (OrderStatus.PREPARED, ActorRole.PICKER),
    (OrderStatus.SHIPPING, ActorRole.COURIER),
    (OrderStatus.DELIVERED, ActorRole.COURIER),
]


def _order_at_state(target_status):
    """Create an order and walk it forward to the desired state."""
    order = _make_order()
    if target_status == OrderStatus.CANCELLED:
        order.advance_to(OrderStatus.CANCELLED, ActorRole.ADMIN)
        order._events.clear()
        return order

    for status, role in _PATH:
        if order.current_status == target_status:
            break
        order.advance_to(status, role)
        order._events.clear()
    return order


_LEGAL_EDGES = {
    (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.ADMIN),
    (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.PICKER),
    (OrderStatus.PREPARING, OrderStatus.PREPARED, ActorRole.PICKER),
    (OrderStatus.PREPARED, OrderStatus.SHIPPING, ActorRole.ADMIN),
    (OrderStatus.PREPARED, OrderStatus.SHIPPING, ActorRole.COURIER),
    (OrderStatus.SHIPPING, OrderStatus.DELIVERED, ActorRole.ADMIN),
    (OrderStatus.SHIPPING, OrderStatus.DELIVERED, ActorRole.COURIER),
    (OrderStatus.PENDING, OrderStatus.CANCELLED, ActorRole.ADMIN),
    (OrderStatus.PREPARING, OrderStatus.CANCELLED, ActorRole.ADMIN),
    (OrderStatus.PREPARED, OrderStatus.CANCELLED, ActorRole.ADMIN),
    (OrderStatus.SHIPPING, OrderStatus.CANCELLED, ActorRole.ADMIN),
}


# ---------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------
class TestTransitionTable:
    @pytest.mark.parametrize(
        "from_status,to_status,role",
        [
            (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.ADMIN),
            (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.PICKER),
            (OrderStatus.PREPARING, OrderStatus.PREPARED, ActorRole.PICKER),
            (OrderStatus.PREPARED, OrderStatus.SHIPPING, ActorRole.ADMIN),
            (OrderStatus.PREPARED, OrderStatus.SHIPPING, ActorRole.COURIER),
            (OrderStatus.SHIPPING, OrderStatus.DELIVERED, ActorRole.ADMIN),
            (OrderStatus.SHIPPING, OrderStatus.DELIVERED, ActorRole.COURIER),
            (OrderStatus.PENDING, OrderStatus.CANCELLED, ActorRole.ADMIN),
            (OrderStatus.SHIPPING, OrderStatus.CANCELLED, ActorRole.ADMIN),
        ],
    )
    def test_legal_edges(self, from_status, to_status, role):
        assert is_legal_transition(from_status, to_status, role)

    @pytest.mark.parametrize(
        "from_status,to_status,role",
        [
            (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.CUSTOMER),
            (OrderStatus.PENDING, OrderStatus.PREPARING, ActorRole.COURIER),
            (OrderStatus.PREPARING, OrderStatus.PREPARED, ActorRole.ADMIN),
            (OrderStatus.PREPARED, OrderStatus.SHIPPING, ActorRole.PICKER),
            (OrderStatus.SHIPPING, OrderStatus.DELIVERED, ActorRole.PICKER),
            (OrderStatus.PENDING, OrderStatus.CANCELLED, ActorRole.PICKER),
            (OrderStatus.PENDING, OrderStatus.CANCELLED, ActorRole.CUSTOMER),
        ],
    )
    def test_role_not_allowed(self, from_status, to_status, role):
        assert not is_legal_transition(from_status, to_status, role)

    @pytest.mark.parametrize(
        "from_status,to_status,role", list(itertools.product(OrderStatus, OrderStatus, ActorRole))
    )
    def test_every_triple_matches_the_edge_list(self, from_status, to_status, role):
        assert is_legal_transition(from_status, to_status, role) == ((from_status, to_status, role) in _LEGAL_EDGES)

    def test_skipping_a_step_has_no_roles(self):
        assert allowed_roles(OrderStatus.PENDING, OrderStatus.SHIPPING) == frozenset()

    def test_backward_edge_has_no_roles(self):
        assert allowed_roles(OrderStatus.PREPARED, OrderStatus.PREPARING) == frozenset()

    def test_terminal_states(self):
        assert is_terminal(OrderStatus.DELIVERED)
        assert is_terminal(OrderStatus.CANCELLED)
        assert not is_terminal(OrderStatus.SHIPPING)

    @pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_states_have_no_exits(self, terminal):
        for target in OrderStatus:
            assert allowed_roles(terminal, target) == frozenset()


# ---------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------
class TestValidTransitions:
    def test_full_path_to_delivered(self):
        order = _order_at_state(OrderStatus.DELIVERED)
        assert order.status == OrderStatus.DELIVERED.value

    def test_admin_starts_preparation(self):
        order = _make_order()
        order.advance_to(OrderStatus.PREPARING, ActorRole.ADMIN, actor_id="admin-1")
        assert order.status == OrderStatus.PREPARING.value
        assert order.status_updated_by == "admin-1"

    def test_accepts_plain_strings(self):
        order = _make_order()
        order.advance_to("preparing", "picker")
        assert order.current_status == OrderStatus.PREPARING

    @pytest.mark.parametrize(
        "state",
        [OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.PREPARED, OrderStatus.SHIPPING],
    )
    def test_admin_cancels_any_open_order(self, state):
        order = _order_at_state(state)
        order.advance_to(OrderStatus.CANCELLED, ActorRole.ADMIN)
        assert order.status == OrderStatus.CANCELLED.value


# ---------------------------------------------------------------
# Guards
# ---------------------------------------------------------------
class TestInvalidTransitions:
    def test_customer_cannot_advance(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.advance_to(OrderStatus.PREPARING, ActorRole.CUSTOMER)
        assert "Cannot transition from pending to preparing as customer" in str(exc.value.messages)

    def test_status_unchanged_after_refusal(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to(OrderStatus.SHIPPING, ActorRole.ADMIN)
        assert order.status == OrderStatus.PENDING.value
        assert order._events == []

    def test_cannot_skip_preparation(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to(OrderStatus.PREPARED, ActorRole.PICKER)

    @pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_cannot_leave_terminal_state(self, terminal):
        order = _order_at_state(terminal)
        with pytest.raises(ValidationError):
            order.advance_to(OrderStatus.CANCELLED, ActorRole.ADMIN)

    def test_unknown_status_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to("lost", ActorRole.ADMIN)

    def test_unknown_role_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to(OrderStatus.PREPARING, "janitor")
