"""In-process order store backed by the Ordering domain's repositories."""

import json

import structlog
from protean.domain import Domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order, OrderStatus
from ordering.order.status import UpdateOrderStatus
from ordering.store.port import OrderPartition, OrderStorePort
from ordering.working_hours.settings import current_window

logger = structlog.get_logger(__name__)

_PENDING_PARTITION_STATUSES = [status.value for status in OrderStatus if status != OrderStatus.DELIVERED]


def query_order_page(partition: OrderPartition, page: int, page_size: int) -> list:
    """One page of the partition, newest first, from the active domain's repository."""
    query = current_domain.repository_for(Order)._dao.query
    if OrderPartition(partition) == OrderPartition.COMPLETED:
        query = query.filter(status=OrderStatus.DELIVERED.value)
    else:
        query = query.filter(status__in=_PENDING_PARTITION_STATUSES)
    return query.order_by("-created_at").offset(page * page_size).limit(page_size).all().items


def _flatten_messages(exc: ValidationError) -> str:
    messages = exc.messages if isinstance(exc.messages, dict) else {"error": [str(exc.messages)]}
    return "; ".join(str(message) for values in messages.values() for message in values)


class DomainOrderStore(OrderStorePort):
    """Order store that processes commands against the Ordering domain.

    Subscribers are notified after every successful mutation, standing in for
    the realtime change feed of a hosted database.
    """

    def __init__(self, domain: Domain = ordering):
        self.domain = domain
        self._subscribers: list = []

    # -------------------------------------------------------------------
    # Change feed
    # -------------------------------------------------------------------
    def subscribe(self, callback):
        self._subscribers.append(callback)

        def dispose() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return dispose

    def _publish(self, change: dict) -> None:
        for callback in list(self._subscribers):
            callback(change)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    async def get_order(self, order_id: str):
        with self.domain.domain_context():
            try:
                return self.domain.repository_for(Order).get(order_id)
            except ObjectNotFoundError:
                return None

    async def fetch_orders(self, partition: OrderPartition, page: int, page_size: int) -> list:
        with self.domain.domain_context():
            return query_order_page(partition, page, page_size)

    async def get_working_hours_window(self):
        with self.domain.domain_context():
            return current_window()

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    async def place_order(
        self,
        customer_id: str,
        items: list[dict],
        total_amount: float,
        payment_method: str,
        shipping_address: dict | None = None,
        delivery_note: str | None = None,
        language: str | None = None,
    ) -> str:
        with self.domain.domain_context():
            order_id = self.domain.process(
                PlaceOrder(
                    customer_id=customer_id,
                    items=json.dumps(items),
                    total_amount=total_amount,
                    payment_method=payment_method,
                    shipping_address=json.dumps(shipping_address) if shipping_address else None,
                    delivery_note=delivery_note,
                    language=language,
                ),
                asynchronous=False,
            )
        self._publish({"event": "INSERT", "order_id": order_id, "status": OrderStatus.PENDING.value})
        return order_id

    async def update_order_status(
        self,
        order_id: str,
        new_status: str,
        actor_role: str,
        actor_id: str | None = None,
        expected_status: str | None = None,
    ) -> dict:
        with self.domain.domain_context():
            try:
                result = self.domain.process(
                    UpdateOrderStatus(
                        order_id=order_id,
                        new_status=new_status,
                        actor_role=actor_role,
                        actor_id=actor_id,
                        expected_status=expected_status,
                    ),
                    asynchronous=False,
                )
            except InvalidOperationError as exc:
                return {"success": False, "error": str(exc), "conflict": True}
            except ValidationError as exc:
                return {"success": False, "error": _flatten_messages(exc), "conflict": False}

            order = self.domain.repository_for(Order).get(order_id)

        self._publish({"event": "UPDATE", "order_id": order_id, "status": order.status})
        return {"success": True, "order": order, **result}
