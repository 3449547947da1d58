"""Delivery template — courier on the way, and delivery confirmation."""

from notifications.notification.notification import NotificationType


class DeliveryTemplate:
    notification_type = NotificationType.DELIVERY.value

    @staticmethod
    def render(context: dict) -> dict:
        order_ref = str(context.get("order_id", ""))[:8] or "N/A"
        if context.get("status") == "delivered":
            return {
                "title": "Order delivered",
                "body": f"Order #{order_ref} was delivered. Enjoy!",
            }
        return {
            "title": "Courier on the way",
            "body": f"Order #{order_ref} is out for delivery.",
        }
