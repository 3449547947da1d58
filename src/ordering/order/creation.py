"""Order placement — command and handler.

Placement is only admitted while the working-hours gate is open.
"""

import json
from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.working_hours.policy import evaluate
from ordering.working_hours.settings import current_window

logger = structlog.get_logger(__name__)


def _local_now() -> datetime:
    return datetime.now()


@ordering.command(part_of="Order")
class PlaceOrder:
    """Place a new order from the customer's cart."""

    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of item dicts
    total_amount = Float(required=True, min_value=0.0)
    payment_method = String(required=True, max_length=10)
    shipping_address = Text()  # JSON address dict
    delivery_note = String(max_length=1000)
    language = String(max_length=5)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        status = evaluate(current_window(), _local_now(), command.language)
        if not status.within_hours:
            logger.info(
                "Order rejected outside working hours",
                customer_id=str(command.customer_id),
                start=status.start,
                end=status.end,
            )
            raise ValidationError({"working_hours": [status.message or f"Orders are accepted {status.start} - {status.end}"]})

        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        address = command.shipping_address
        if isinstance(address, str):
            address = json.loads(address)

        order = Order.create(
            customer_id=command.customer_id,
            items_data=items_data,
            total_amount=command.total_amount,
            payment_method=command.payment_method,
            shipping_address=address,
            delivery_note=command.delivery_note,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            item_count=len(items_data),
        )
        return str(order.id)
