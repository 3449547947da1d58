"""Order status template — sent while the order is being prepared, or when cancelled."""

from notifications.notification.notification import NotificationType

_MESSAGES = {
    "preparing": ("Preparing your order", "Order #{order_ref} is being prepared."),
    "prepared": ("Order ready", "Order #{order_ref} is packed and waiting for a courier."),
    "cancelled": ("Order cancelled", "Order #{order_ref} was cancelled."),
}


class OrderStatusTemplate:
    notification_type = NotificationType.ORDER_STATUS.value

    @staticmethod
    def render(context: dict) -> dict:
        order_ref = str(context.get("order_id", ""))[:8] or "N/A"
        status = context.get("status", "")
        title, body = _MESSAGES.get(status, ("Order updated", "Order #{order_ref} is now " + status + "."))
        return {"title": title, "body": body.format(order_ref=order_ref)}
