"""Push channel registry.

Provides singleton access to the push adapter. Uses the fake adapter by
default; ``PUSH_ADAPTER=expo`` selects the Expo push service.
"""

import os

from notifications.channel.push_port import PushPort

_channel_instances: dict[str, PushPort] = {}


def get_push_channel() -> PushPort:
    """Return the configured push adapter (singleton per adapter name)."""
    adapter = os.getenv("PUSH_ADAPTER", "fake").lower()
    if adapter not in _channel_instances:
        if adapter == "fake":
            from notifications.channel.fake_push import FakePushAdapter

            _channel_instances[adapter] = FakePushAdapter()
        elif adapter == "expo":
            from notifications.channel.expo_push import ExpoPushAdapter

            _channel_instances[adapter] = ExpoPushAdapter()
        else:
            raise ValueError(f"Unknown push adapter: {adapter}")

    return _channel_instances[adapter]


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
