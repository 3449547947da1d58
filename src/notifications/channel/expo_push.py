"""Expo push service adapter.

Posts batches of messages to the Expo push API. Each message gets its own
ticket in the response; a ticket with status "error" marks that message as
failed without affecting the rest of the batch.
"""

import os

import requests
import structlog
from notifications.channel.push_port import PushPort

logger = structlog.get_logger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
# The push API accepts at most 100 messages per request
MAX_BATCH = 100


class ExpoPushAdapter(PushPort):
    def __init__(
        self,
        url: str | None = None,
        access_token: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.url = url or os.getenv("EXPO_PUSH_URL", EXPO_PUSH_URL)
        self.access_token = access_token or os.getenv("EXPO_ACCESS_TOKEN")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    @staticmethod
    def _to_expo(message: dict) -> dict:
        return {
            "to": message["device_token"],
            "title": message["title"],
            "body": message["body"],
            "data": message.get("data") or {},
            "sound": "default",
        }

    @staticmethod
    def _ticket_result(ticket: dict) -> dict:
        if ticket.get("status") == "ok":
            return {"message_id": ticket.get("id"), "status": "sent"}
        details = ticket.get("details") or {}
        return {
            "message_id": None,
            "status": "failed",
            "error": details.get("error") or ticket.get("message") or "Push delivery failed",
        }

    def send(self, device_token: str, title: str, body: str, data: dict | None = None) -> dict:
        return self.send_many([{"device_token": device_token, "title": title, "body": body, "data": data}])[0]

    def send_many(self, messages: list[dict]) -> list[dict]:
        results: list[dict] = []
        for start in range(0, len(messages), MAX_BATCH):
            results.extend(self._send_batch(messages[start : start + MAX_BATCH]))
        return results

    def _send_batch(self, batch: list[dict]) -> list[dict]:
        try:
            response = self.session.post(
                self.url,
                json=[self._to_expo(message) for message in batch],
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Push batch failed", size=len(batch), error=str(exc))
            return [{"message_id": None, "status": "failed", "error": str(exc)} for _ in batch]

        tickets = body.get("data", []) if isinstance(body, dict) else None
        if not isinstance(tickets, list) or not all(isinstance(ticket, dict) for ticket in tickets):
            logger.error("Malformed push response", size=len(batch), body_type=type(body).__name__)
            return [{"message_id": None, "status": "failed", "error": "Malformed push response"} for _ in batch]

        if len(tickets) != len(batch):
            logger.error("Push ticket count mismatch", expected=len(batch), received=len(tickets))
            return [{"message_id": None, "status": "failed", "error": "Missing push ticket"} for _ in batch]

        return [self._ticket_result(ticket) for ticket in tickets]
