"""Push channel port — abstract interface for delivering push notifications to devices."""

from abc import ABC, abstractmethod


class PushPort(ABC):
    """Abstract interface for push delivery adapters."""

    @abstractmethod
    def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict | None = None,
    ) -> dict:
        """Send one push notification.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

    def send_many(self, messages: list[dict]) -> list[dict]:
        """Send several notifications; results are returned in the same order.

        Each message is a dict with device_token, title, body and optional data.
        Adapters that support batching override this.
        """
        return [self.send(**message) for message in messages]
