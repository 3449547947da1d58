"""Shared helpers for notification event handlers.

Provides the common pattern: look up the user's push registration → check
preferences → render template → create a pending Notification row.
"""

import structlog
from notifications.notification.notification import Notification
from notifications.preference.management import find_preference
from notifications.registration.management import find_registration
from notifications.registration.registration import PushRegistration
from notifications.templates import get_template
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


def create_notification_for_user(
    user_id: str,
    notification_type: str,
    context: dict | None = None,
    data: dict | None = None,
    title: str | None = None,
    body: str | None = None,
) -> str | None:
    """Create a pending notification for a user if they can and want to receive it.

    The content comes from the type's template unless ``title`` and ``body``
    are given explicitly.

    Returns:
        The notification ID, or None when the user has no push token or has
        opted out of this notification type.
    """
    registration = find_registration(user_id)
    if registration is None or not registration.has_token:
        logger.info("User has no push token", user_id=user_id, notification_type=notification_type)
        return None

    preference = find_preference(user_id)
    if preference is not None and not preference.allows(notification_type):
        logger.info(
            "User opted out of notification type",
            user_id=user_id,
            notification_type=notification_type,
        )
        return None

    if title is None or body is None:
        rendered = get_template(notification_type).render(context or {})
        title = title or rendered["title"]
        body = body or rendered["body"]

    notification = Notification.create(
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        body=body,
        data=data,
        push_token=registration.device_token,
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Notification created",
        user_id=user_id,
        notification_type=notification_type,
        notification_id=str(notification.id),
    )
    return str(notification.id)


def notify_role(
    role: str,
    notification_type: str,
    context: dict | None = None,
    data: dict | None = None,
    title: str | None = None,
    body: str | None = None,
) -> int:
    """Create the same notification for every user with ``role`` that has a push token.

    Returns:
        Number of notifications created.
    """
    repo = current_domain.repository_for(PushRegistration)
    registrations = repo._dao.query.filter(role=role).all().items

    created = 0
    for registration in registrations:
        if not registration.has_token:
            continue
        notification_id = create_notification_for_user(
            user_id=str(registration.user_id),
            notification_type=notification_type,
            context=context,
            data=data,
            title=title,
            body=body,
        )
        if notification_id:
            created += 1

    logger.info("Role notification fan-out", role=role, notification_type=notification_type, count=created)
    return created
