"""Fake push adapter — records deliveries in memory for tests and local runs."""

from uuid import uuid4

from notifications.channel.push_port import PushPort


class FakePushAdapter(PushPort):
    """Push adapter that records notifications in memory for test assertions."""

    def __init__(self):
        self.sent_pushes: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.rejected_tokens: set[str] = set()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Push delivery failed",
        rejected_tokens: set[str] | None = None,
    ):
        """Fail every send, or only sends to ``rejected_tokens``."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.rejected_tokens = set(rejected_tokens or ())

    def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict | None = None,
    ) -> dict:
        if not self.should_succeed or device_token in self.rejected_tokens:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent_pushes.append(
            {
                "message_id": message_id,
                "device_token": device_token,
                "title": title,
                "body": body,
                "data": data,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear sent pushes and restore default behaviour."""
        self.sent_pushes.clear()
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.rejected_tokens = set()
