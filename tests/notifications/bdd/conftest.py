"""Shared BDD fixtures and step definitions for the Notifications domain."""

import pytest
from notifications.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRead,
    NotificationSent,
)
from notifications.notification.notification import Notification, NotificationType
from pytest_bdd import given, parsers, then

_NOTIFICATION_EVENT_CLASSES = {
    "NotificationCreated": NotificationCreated,
    "NotificationSent": NotificationSent,
    "NotificationFailed": NotificationFailed,
    "NotificationRead": NotificationRead,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _notification():
    return Notification.create(
        user_id="user-bdd",
        notification_type=NotificationType.ORDER_STATUS.value,
        title="Order ready",
        body="Order #ord-bdd is packed.",
        data={"orderId": "ord-bdd", "orderStatus": "prepared"},
        push_token="ExponentPushToken[bdd]",
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending notification", target_fixture="notification")
def pending_notification():
    n = _notification()
    n._events.clear()
    return n


@given("a sent notification", target_fixture="notification")
def sent_notification():
    n = _notification()
    n.mark_sent()
    n._events.clear()
    return n


@given(parsers.cfparse('the notification failed with "{reason}"'), target_fixture="notification")
def failed_notification(notification, reason):
    notification.mark_failed(reason)
    notification._events.clear()
    return notification


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the notification status is "{status}"'))
def notification_status(notification, status):
    assert notification.status == status


@then("the notification action fails with a validation error")
def notification_action_fails(error):
    assert error["exc"] is not None


@then(parsers.cfparse("a {event_type} notification event is raised"))
def notification_event_raised(notification, event_type):
    event_cls = _NOTIFICATION_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in notification._events)


@then(parsers.cfparse("{count:d} {event_type} notification event is raised"))
def notification_event_count(notification, count, event_type):
    event_cls = _NOTIFICATION_EVENT_CLASSES[event_type]
    assert sum(1 for e in notification._events if isinstance(e, event_cls)) == count
