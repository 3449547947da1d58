"""Fake device — in-memory notification subsystem for tests and local runs."""

from notifications.device.listeners import ListenerRegistry
from notifications.device.port import DevicePort


class FakeDevice(DevicePort):
    def __init__(self, push_token: str | None = "ExponentPushToken[fake-device]"):
        self.push_token = push_token
        self.badge_count = 0
        self.badge_history: list[int] = []
        self.dismiss_count = 0
        self.fail_badge = False
        self.received = ListenerRegistry("received")
        self.responses = ListenerRegistry("response")

    async def get_push_token(self) -> str | None:
        return self.push_token

    async def set_badge_count(self, count: int) -> None:
        if self.fail_badge:
            raise RuntimeError("Badge update rejected")
        self.badge_count = count
        self.badge_history.append(count)

    async def dismiss_all(self) -> None:
        self.dismiss_count += 1

    def add_received_listener(self, listener):
        return self.received.add(listener)

    def add_response_listener(self, listener):
        return self.responses.add(listener)

    # Simulation helpers
    def deliver(self, payload: dict) -> None:
        """Simulate a notification arriving while the app is in the foreground."""
        self.received.emit(payload)

    def tap(self, payload: dict) -> None:
        """Simulate the user tapping a notification."""
        self.responses.emit(payload)
