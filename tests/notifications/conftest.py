import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from notifications.backend.port import BackendUnavailableError, NotificationBackendPort, NotificationRecord
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications
    from shared.db import drop_db, setup_db

    bed = DomainFixture(notifications)
    bed.setup()
    setup_db(notifications)
    yield bed
    drop_db(notifications)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(notifications_bed):
    from notifications.channel import reset_channels

    reset_channels()
    with notifications_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()
    reset_channels()


class FakeBackend(NotificationBackendPort):
    """Scriptable notification backend.

    ``ready_after`` saves return False before the profile becomes resolvable.
    Setting ``unavailable`` makes every call raise BackendUnavailableError.
    When ``delivery_gate`` is set, ``trigger_delivery`` blocks until it opens.
    """

    def __init__(self):
        self.ready_after = 0
        self.unavailable = False
        self.save_calls: list[tuple[str, str]] = []
        self.clear_calls: list[str] = []
        self.read_calls: list[str] = []
        self.confirm_reads = True
        self.records: list[NotificationRecord] = []
        self.pending = 0
        self.delivery_result = {"sent": 0, "failed": 0, "total": 0}
        self.delivery_error: Exception | None = None
        self.delivery_gate: asyncio.Event | None = None
        self.delivery_calls = 0
        self.tokens: dict[str, str] = {}

    def _check(self):
        if self.unavailable:
            raise BackendUnavailableError("Network request failed")

    async def save_push_token(self, user_id, token):
        self._check()
        self.save_calls.append((user_id, token))
        if len(self.save_calls) <= self.ready_after:
            return False
        self.tokens[user_id] = token
        return True

    async def clear_push_token(self, user_id):
        self._check()
        self.clear_calls.append(user_id)
        return self.tokens.pop(user_id, None) is not None

    async def get_user_notifications(self, user_id, limit=50):
        self._check()
        return [record for record in self.records if record.user_id == user_id][:limit]

    async def mark_notification_read(self, notification_id):
        self._check()
        self.read_calls.append(notification_id)
        return self.confirm_reads

    async def count_pending(self):
        self._check()
        return self.pending

    async def trigger_delivery(self):
        self.delivery_calls += 1
        if self.delivery_gate is not None:
            await self.delivery_gate.wait()
        if self.delivery_error is not None:
            raise self.delivery_error
        return dict(self.delivery_result)


def _record(record_id, user_id="user-001", read=False, minutes_ago=0, data=None):
    created_at = datetime(2024, 5, 1, 12, 0, tzinfo=UTC) - timedelta(minutes=minutes_ago)
    return NotificationRecord(
        id=record_id,
        user_id=user_id,
        title="Preparing your order",
        body=f"Notification {record_id}",
        notification_type="order_status",
        status="sent",
        created_at=created_at,
        read_at=created_at if read else None,
        data=data if data is not None else {"orderId": f"ord-{record_id}", "orderStatus": "preparing"},
    )


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def device():
    from notifications.device.fake_device import FakeDevice

    return FakeDevice()


@pytest.fixture()
def make_record():
    return _record
