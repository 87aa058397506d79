from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from autoconfirm.api.main import create_app
from autoconfirm.application.use_cases.sync_mailbox import MailboxSyncEngine
from autoconfirm.infrastructure.settings import Settings, get_settings
from autoconfirm.infrastructure.wiring import get_sync_engine
from tests.helpers import FakeMailboxProvider, MemoryCheckpointStore, RecordingDispatcher, make_message, push_data


@pytest.fixture
def provider() -> FakeMailboxProvider:
    return FakeMailboxProvider(
        messages={i: make_message(i) for i in ("first", "second")},
        newest=["first"],
        added=["first", "second"],
    )


@pytest.fixture
def store() -> MemoryCheckpointStore:
    return MemoryCheckpointStore()


@pytest.fixture
def engine(provider, store) -> MailboxSyncEngine:
    return MailboxSyncEngine(provider, RecordingDispatcher(), store=store)


@pytest.fixture
def client(engine):
    app = create_app()
    app.dependency_overrides[get_sync_engine] = lambda: engine
    app.dependency_overrides[get_settings] = lambda: Settings(gcp_project_id="household-proj")
    with TestClient(app) as client:
        yield client


def envelope(payload: dict) -> dict:
    return {
        "message": {"data": push_data(payload), "messageId": "136969346945", "publishTime": "2026-10-19T08:00:00Z"},
        "subscription": "projects/household-proj/subscriptions/gmail-push",
    }


def test_first_notification_initializes_then_syncs(client, engine) -> None:
    first = client.post("/gmail-webhook", json=envelope({"emailAddress": "me@example.com", "historyId": 1500}))
    assert first.status_code == 200
    assert first.text == "Initialized with first mail"
    assert engine.last_checkpoint == 1500

    second = client.post("/gmail-webhook", json=envelope({"emailAddress": "me@example.com", "historyId": "1600"}))
    assert second.status_code == 200
    assert second.text == "OK"
    assert engine.last_checkpoint == 1600
    assert engine.processed == {"first", "second"}


def test_notification_without_history_id(client, provider) -> None:
    response = client.post("/gmail-webhook", json=envelope({"emailAddress": "me@example.com"}))

    assert response.status_code == 200
    assert response.text == "No historyId"
    assert provider.calls == []


@pytest.mark.parametrize("history_id", [0, "0", "not-a-number", "²"])
def test_unusable_history_id_is_a_no_op(client, engine, provider, history_id) -> None:
    response = client.post("/gmail-webhook", json=envelope({"emailAddress": "me@example.com", "historyId": history_id}))

    assert response.status_code == 200
    assert response.text == "No historyId"
    assert provider.calls == []
    assert engine.last_checkpoint is None


@pytest.mark.parametrize(
    "body",
    [
        {"subscription": "projects/p/subscriptions/s"},
        {"message": {"messageId": "1"}},
        {"message": {"data": "%%%not-base64%%%"}},
        {"message": {"data": "bm90IGpzb24="}},
        ["not", "an", "object"],
    ],
)
def test_malformed_envelope_is_rejected(client, provider, body) -> None:
    response = client.post("/gmail-webhook", json=body)

    assert response.status_code == 400
    assert response.text == "Invalid Pub/Sub data"
    assert provider.calls == []


def test_non_json_body_is_rejected(client) -> None:
    response = client.post("/gmail-webhook", content=b"hello", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400


def test_reconcile_failure_returns_500(client, engine, provider) -> None:
    client.post("/gmail-webhook", json=envelope({"historyId": 10}))
    provider.history_error = RuntimeError("quota exceeded")

    response = client.post("/gmail-webhook", json=envelope({"historyId": 20}))

    assert response.status_code == 500
    assert response.text == "Error: quota exceeded"
    assert engine.last_checkpoint == 10


def test_get_on_webhook_is_not_allowed(client) -> None:
    assert client.get("/gmail-webhook").status_code == 405


def test_start_watch_adopts_history_id(client, engine, provider, store) -> None:
    response = client.get("/start-watch")

    assert response.status_code == 200
    body = response.json()
    assert body["historyId"] == "9000"
    assert body["topic"] == "projects/household-proj/topics/gmail-notifications"
    assert body["labelIds"] == ["INBOX"]
    assert provider.calls == [("watch", "projects/household-proj/topics/gmail-notifications", ("INBOX",))]
    assert engine.last_checkpoint == 9000
    assert store.saves == [9000]


def test_start_watch_failure_returns_500(client, engine, provider) -> None:
    async def broken_watch(topic, label_ids):
        raise RuntimeError("topic not found")

    provider.watch = broken_watch

    response = client.get("/start-watch")

    assert response.status_code == 500
    assert response.json() == {"error": "topic not found"}
    assert engine.last_checkpoint is None


def test_health_endpoints(client, engine) -> None:
    assert client.get("/health").json()["status"] == "healthy"

    ready = client.get("/health/ready").json()
    assert ready["status"] == "awaiting_first_notification"
    assert ready["checkpoint"] is None

    client.post("/gmail-webhook", json=envelope({"historyId": 77}))
    ready = client.get("/health/ready").json()
    assert ready["status"] == "ready"
    assert ready["checkpoint"] == 77


def test_start_watch_without_project_id_makes_no_provider_call(client, engine, provider) -> None:
    client.app.dependency_overrides[get_settings] = lambda: Settings(gcp_project_id="")

    response = client.get("/start-watch")

    assert response.status_code == 500
    assert "GCP_PROJECT_ID" in response.json()["error"]
    assert provider.calls == []
    assert engine.last_checkpoint is None
