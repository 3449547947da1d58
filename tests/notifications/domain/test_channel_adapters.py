"""Tests for push channel adapters and the channel registry."""

import pytest
import requests
from notifications.channel import get_push_channel, reset_channels
from notifications.channel.expo_push import ExpoPushAdapter
from notifications.channel.fake_push import FakePushAdapter


class _Response:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class _Session:
    """Records posted batches and answers with one ticket per message."""

    def __init__(self, ticket=None, response=None, error=None):
        self.ticket = ticket or (lambda message: {"status": "ok", "id": f"ticket-{message['to']}"})
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, json, headers, timeout):
        self.posts.append({"url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        if self.response is not None:
            return self.response
        return _Response({"data": [self.ticket(message) for message in json]})


def _message(token="ExponentPushToken[a]"):
    return {"device_token": token, "title": "Hi", "body": "There", "data": {"orderId": "ord-1"}}


class TestRegistry:
    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("PUSH_ADAPTER", raising=False)
        reset_channels()
        assert isinstance(get_push_channel(), FakePushAdapter)

    def test_singleton(self):
        assert get_push_channel() is get_push_channel()

    def test_expo_selected_by_env(self, monkeypatch):
        monkeypatch.setenv("PUSH_ADAPTER", "expo")
        reset_channels()
        assert isinstance(get_push_channel(), ExpoPushAdapter)

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("PUSH_ADAPTER", "pigeon")
        reset_channels()
        with pytest.raises(ValueError):
            get_push_channel()


class TestFakePushAdapter:
    def test_records_sends(self):
        adapter = FakePushAdapter()
        result = adapter.send("tok", "Hi", "There", {"orderId": "1"})
        assert result["status"] == "sent"
        assert adapter.sent_pushes[0]["device_token"] == "tok"

    def test_global_failure(self):
        adapter = FakePushAdapter()
        adapter.configure(should_succeed=False, failure_reason="MessageRateExceeded")
        assert adapter.send("tok", "Hi", "There") == {
            "message_id": None,
            "status": "failed",
            "error": "MessageRateExceeded",
        }

    def test_rejected_tokens_only(self):
        adapter = FakePushAdapter()
        adapter.configure(rejected_tokens={"bad"})
        results = adapter.send_many([_message("good"), _message("bad")])
        assert [r["status"] for r in results] == ["sent", "failed"]

    def test_reset(self):
        adapter = FakePushAdapter()
        adapter.configure(should_succeed=False)
        adapter.send("tok", "Hi", "There")
        adapter.reset()
        assert adapter.sent_pushes == []
        assert adapter.send("tok", "Hi", "There")["status"] == "sent"


class TestExpoPushAdapter:
    def test_maps_messages_and_tickets(self):
        session = _Session()
        adapter = ExpoPushAdapter(url="https://push.test/send", access_token="secret", session=session)

        results = adapter.send_many([_message("a"), _message("b")])

        assert [r["status"] for r in results] == ["sent", "sent"]
        assert results[0]["message_id"] == "ticket-a"
        post = session.posts[0]
        assert post["url"] == "https://push.test/send"
        assert post["headers"]["Authorization"] == "Bearer secret"
        assert post["json"][0] == {
            "to": "a",
            "title": "Hi",
            "body": "There",
            "data": {"orderId": "ord-1"},
            "sound": "default",
        }

    def test_error_ticket_fails_only_that_message(self):
        def ticket(message):
            if message["to"] == "bad":
                return {"status": "error", "message": "not registered", "details": {"error": "DeviceNotRegistered"}}
            return {"status": "ok", "id": "t1"}

        adapter = ExpoPushAdapter(session=_Session(ticket=ticket))
        results = adapter.send_many([_message("good"), _message("bad")])

        assert results[0]["status"] == "sent"
        assert results[1] == {"message_id": None, "status": "failed", "error": "DeviceNotRegistered"}

    def test_batches_of_one_hundred(self):
        session = _Session()
        adapter = ExpoPushAdapter(session=session)
        results = adapter.send_many([_message(f"t{i}") for i in range(150)])

        assert len(results) == 150
        assert [len(post["json"]) for post in session.posts] == [100, 50]

    def test_transport_error_fails_batch(self):
        adapter = ExpoPushAdapter(session=_Session(error=requests.ConnectionError("offline")))
        results = adapter.send_many([_message("a"), _message("b")])
        assert all(r["status"] == "failed" for r in results)
        assert "offline" in results[0]["error"]

    def test_http_error_fails_batch(self):
        adapter = ExpoPushAdapter(session=_Session(response=_Response({}, status_code=500)))
        assert adapter.send("a", "Hi", "There")["status"] == "failed"

    def test_missing_tickets_fail_batch(self):
        adapter = ExpoPushAdapter(session=_Session(response=_Response({"data": []})))
        assert adapter.send("a", "Hi", "There")["error"] == "Missing push ticket"

    @pytest.mark.parametrize("payload", [["ok"], "accepted", {"data": "ok"}, {"data": ["ok"]}])
    def test_unexpected_body_fails_batch(self, payload):
        adapter = ExpoPushAdapter(session=_Session(response=_Response(payload)))
        assert adapter.send("a", "Hi", "There") == {
            "message_id": None,
            "status": "failed",
            "error": "Malformed push response",
        }
