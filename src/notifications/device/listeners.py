"""Listener registration with explicit disposers.

Every ``add`` returns a ``Subscription``; removing it is idempotent. Events
are delivered to listeners in registration order, once per listener.
"""

from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class Subscription:
    def __init__(self, dispose: Callable[[], None]):
        self._dispose = dispose
        self.active = True

    def remove(self) -> None:
        if self.active:
            self.active = False
            self._dispose()


class ListenerRegistry:
    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Callable] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Callable) -> Subscription:
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(dispose)

    def emit(self, payload) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception as exc:
                # One faulty listener must not starve the others of the event
                logger.error("Listener failed", registry=self.name, error=str(exc))
