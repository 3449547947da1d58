"""Order created template — confirmation for the customer, work alert for staff."""

from notifications.notification.notification import NotificationType


class OrderCreatedTemplate:
    notification_type = NotificationType.ORDER_CREATED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_ref = str(context.get("order_id", ""))[:8] or "N/A"
        if context.get("audience") == "staff":
            return {
                "title": "New order",
                "body": f"Order #{order_ref} is waiting to be prepared.",
            }
        total = context.get("total_amount")
        amount = f" Total: {float(total):.2f}." if total is not None else ""
        return {
            "title": "Order received",
            "body": f"We received your order #{order_ref}.{amount}",
        }
