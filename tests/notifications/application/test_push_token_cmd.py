"""Application tests for SavePushToken / ClearPushToken."""

import pytest
from notifications.registration.management import ClearPushToken, SavePushToken, find_registration
from notifications.registration.registration import PushRegistration
from protean import current_domain
from protean.exceptions import InvalidOperationError


def _provision(user_id="user-001", role="customer"):
    registration = PushRegistration.provision(user_id=user_id, role=role)
    current_domain.repository_for(PushRegistration).add(registration)
    return registration


class TestSavePushToken:
    def test_saves_on_provisioned_profile(self):
        _provision()

        updated = current_domain.process(
            SavePushToken(user_id="user-001", device_token="ExponentPushToken[a]"),
            asynchronous=False,
        )

        assert updated == 1
        assert find_registration("user-001").device_token == "ExponentPushToken[a]"

    def test_unknown_profile_updates_nothing(self):
        updated = current_domain.process(
            SavePushToken(user_id="ghost", device_token="ExponentPushToken[a]"),
            asynchronous=False,
        )
        assert updated == 0
        assert find_registration("ghost") is None

    def test_overwrites_previous_token(self):
        _provision()
        for token in ("ExponentPushToken[a]", "ExponentPushToken[b]"):
            current_domain.process(SavePushToken(user_id="user-001", device_token=token), asynchronous=False)

        assert find_registration("user-001").device_token == "ExponentPushToken[b]"

    def test_owner_may_write(self):
        _provision()
        updated = current_domain.process(
            SavePushToken(user_id="user-001", device_token="ExponentPushToken[a]", actor_id="user-001"),
            asynchronous=False,
        )
        assert updated == 1

    def test_other_user_refused(self):
        _provision()
        with pytest.raises(InvalidOperationError):
            current_domain.process(
                SavePushToken(user_id="user-001", device_token="ExponentPushToken[a]", actor_id="user-999"),
                asynchronous=False,
            )
        assert not find_registration("user-001").has_token


class TestClearPushToken:
    def test_clears(self):
        _provision()
        current_domain.process(
            SavePushToken(user_id="user-001", device_token="ExponentPushToken[a]"),
            asynchronous=False,
        )

        cleared = current_domain.process(ClearPushToken(user_id="user-001"), asynchronous=False)

        assert cleared == 1
        assert not find_registration("user-001").has_token

    def test_nothing_to_clear(self):
        _provision()
        assert current_domain.process(ClearPushToken(user_id="user-001"), asynchronous=False) == 0

    def test_other_user_refused(self):
        _provision()
        with pytest.raises(InvalidOperationError):
            current_domain.process(ClearPushToken(user_id="user-001", actor_id="user-999"), asynchronous=False)
