"""Atomic order status procedure — command and handler.

The handler performs a compare-and-set: when the caller names the status it
believes the order is in and the stored order has moved on, the update is
refused as a conflict instead of being applied on top of stale state.
"""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to ``new_status`` on behalf of an actor."""

    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    actor_role = String(required=True, max_length=20)
    actor_id = Identifier()
    expected_status = String(max_length=20)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise InvalidOperationError(f"Order {command.order_id} no longer exists") from None

        if command.expected_status and order.status != command.expected_status:
            logger.info(
                "Order status changed concurrently",
                order_id=str(order.id),
                expected=command.expected_status,
                actual=order.status,
            )
            raise InvalidOperationError(
                f"Order {order.id} is {order.status}, expected {command.expected_status}"
            )

        previous = order.status
        order.advance_to(command.new_status, command.actor_role, command.actor_id)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            old_status=previous,
            new_status=order.status,
            actor_role=command.actor_role,
        )
        return {
            "order_id": str(order.id),
            "old_status": previous,
            "new_status": order.status,
            "updated_at": order.updated_at,
        }
