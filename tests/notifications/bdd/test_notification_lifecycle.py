"""BDD tests for notification delivery and read state."""

from protean.exceptions import ValidationError
from pytest_bdd import scenarios, then, when

scenarios("features/notification_lifecycle.feature")


@when("the notification is marked as sent", target_fixture="notification")
def mark_sent(notification, error):
    try:
        notification.mark_sent()
    except ValidationError as exc:
        error["exc"] = exc
    return notification


@when("the user reads the notification", target_fixture="notification")
def read_notification(notification):
    notification.mark_read()
    return notification


@then("the notification is read")
def notification_is_read(notification):
    assert notification.is_read
