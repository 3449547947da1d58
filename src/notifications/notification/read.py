"""Read markers — command and handler for marking a notification read.

Marking an already-read notification succeeds without changing ``read_at``.
"""

from notifications.domain import notifications
from notifications.notification.notification import Notification
from protean.exceptions import InvalidOperationError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="Notification")
class MarkNotificationRead:
    """Record that the user read a notification."""

    notification_id: Identifier(required=True)
    user_id: Identifier()  # When given, must own the notification


@notifications.command_handler(part_of=Notification)
class ReadMarkerHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command: MarkNotificationRead) -> bool:
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        if command.user_id and str(notification.user_id) != str(command.user_id):
            raise InvalidOperationError(f"Notification {command.notification_id} belongs to another user")

        if notification.mark_read():
            repo.add(notification)
        return True
