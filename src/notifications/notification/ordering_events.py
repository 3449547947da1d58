"""Inbound cross-domain event handler — Notifications reacts to Order events.

Listens for OrderPlaced (customer confirmation plus an alert to pickers) and
OrderStatusChanged (status update, or delivery notice once the order is out
for delivery).
"""

import structlog
from notifications.domain import notifications
from notifications.notification.helpers import create_notification_for_user, notify_role
from notifications.notification.notification import Notification, NotificationType
from notifications.registration.registration import UserRole
from protean.utils.mixins import handle
from shared.events.ordering import OrderPlaced, OrderStatusChanged

logger = structlog.get_logger(__name__)

notifications.register_external_event(OrderPlaced, "Ordering.OrderPlaced.v1")
notifications.register_external_event(OrderStatusChanged, "Ordering.OrderStatusChanged.v1")

_DELIVERY_STATUSES = {"shipping", "delivered"}


@notifications.event_handler(part_of=Notification, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to create push notifications."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        """Confirm the order to the customer and alert pickers."""
        data = {"orderId": str(event.order_id), "orderStatus": "pending"}
        create_notification_for_user(
            user_id=str(event.customer_id),
            notification_type=NotificationType.ORDER_CREATED.value,
            context={"order_id": str(event.order_id), "total_amount": event.total_amount},
            data=data,
        )
        notify_role(
            role=UserRole.PICKER.value,
            notification_type=NotificationType.ORDER_CREATED.value,
            context={"order_id": str(event.order_id), "audience": "staff"},
            data=data,
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        """Tell the customer where their order is."""
        notification_type = (
            NotificationType.DELIVERY.value
            if event.new_status in _DELIVERY_STATUSES
            else NotificationType.ORDER_STATUS.value
        )
        create_notification_for_user(
            user_id=str(event.customer_id),
            notification_type=notification_type,
            context={"order_id": str(event.order_id), "status": event.new_status},
            data={"orderId": str(event.order_id), "orderStatus": event.new_status},
        )
