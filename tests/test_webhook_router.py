from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from hillmonitor.config import settings
from hillmonitor.cors import create_cors_handler
from hillmonitor.domain.signatures import SIGNATURE_HEADER, compute_signature
from hillmonitor.models.webhooks import (
    GazetteProcessedData,
    MeetingProcessedEvent,
    UnknownWebhookEvent,
    parse_webhook_payload,
)
from hillmonitor.domain.errors import InvalidRequestError
from hillmonitor.routers import webhooks as webhooks_router
from hillmonitor.routers.webhooks import WebhookConfig, serve_webhook


SECRET = "whsec-test"
ORIGIN = "https://platform.hillmonitor.ca"


class CallbackRecorder:
    def __init__(self):
        self.calls: list[tuple[str, object]] = []

    def make(self, name: str):
        async def _callback(value, ctx):
            self.calls.append((name, value))

        return _callback


def _signed_post(client: TestClient, payload, secret: str = SECRET, signature: str | None = None):
    body = payload if isinstance(payload, (bytes, str)) else json.dumps(payload)
    headers = {"Content-Type": "application/json"}
    headers[SIGNATURE_HEADER] = signature if signature is not None else compute_signature(body, secret)
    return client.post("/webhook", content=body, headers=headers)


def _client(recorder: CallbackRecorder | None = None, **config_kwargs) -> TestClient:
    recorder = recorder or CallbackRecorder()
    config_kwargs.setdefault("secret", SECRET)
    config_kwargs.setdefault("cors", create_cors_handler([ORIGIN]))
    config = WebhookConfig(
        on_meeting_processed=recorder.make("meeting"),
        on_gazette_processed=recorder.make("gazette"),
        on_govt_release_processed=recorder.make("govt_release"),
        **config_kwargs,
    )
    return TestClient(serve_webhook(config))


@pytest.fixture(autouse=True)
def _webhook_settings(monkeypatch):
    monkeypatch.setattr(settings, "hillmonitor_webhook_secret", None)
    monkeypatch.setattr(settings, "environment", "production")


def test_meeting_processed_invokes_only_meeting_callback():
    recorder = CallbackRecorder()
    client = _client(recorder)

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}})

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert recorder.calls == [("meeting", 7)]


def test_gazette_processed_receives_data_model():
    recorder = CallbackRecorder()
    client = _client(recorder)

    response = _signed_post(client, {"event": "gazette.processed", "data": {"edition_id": 3}})

    assert response.status_code == 200
    assert recorder.calls == [("gazette", GazetteProcessedData(edition_id=3))]


def test_unknown_event_is_acknowledged_without_dispatch():
    recorder = CallbackRecorder()
    client = _client(recorder)

    response = _signed_post(client, {"event": "bill.introduced", "data": {"bill_id": "C-1"}})

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert recorder.calls == []


def test_known_event_without_registered_callback_is_acknowledged():
    client = TestClient(serve_webhook(WebhookConfig(secret=SECRET, cors=create_cors_handler([ORIGIN]))))

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}})

    assert response.status_code == 200


def test_secret_falls_back_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "hillmonitor_webhook_secret", "from-env")
    recorder = CallbackRecorder()
    client = _client(recorder, secret=None)

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 1}}, secret="from-env")

    assert response.status_code == 200
    assert recorder.calls == [("meeting", 1)]


@pytest.mark.parametrize("signature", ["", "deadbeef", "sha256=" + "0" * 64, "0" * 64])
def test_bad_signatures_are_unauthorized_without_detail(signature):
    recorder = CallbackRecorder()
    client = _client(recorder)

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}}, signature=signature)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert recorder.calls == []


def test_missing_signature_header_is_unauthorized():
    client = _client()
    response = client.post("/webhook", json={"event": "meeting.processed", "data": {"meeting_id": 7}})
    assert response.status_code == 401


def test_signature_over_different_secret_is_unauthorized():
    client = _client()
    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}}, secret="other")
    assert response.status_code == 401


@pytest.mark.parametrize(
    "body",
    [
        "{not json",
        json.dumps([1, 2, 3]),
        json.dumps({"data": {"meeting_id": 7}}),
        json.dumps({"event": "meeting.processed", "data": {"meeting_id": "seven"}}),
    ],
)
def test_signed_but_unparseable_payloads_are_bad_requests(body):
    recorder = CallbackRecorder()
    client = _client(recorder)

    response = _signed_post(client, body)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON payload"}
    assert recorder.calls == []


def test_missing_secret_is_a_generic_server_error():
    client = _client(secret=None)

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
def test_non_post_methods_are_not_allowed(method):
    client = _client()
    response = client.request(method, "/webhook")
    assert response.status_code == 405


@pytest.mark.parametrize("method", ["HEAD", "TRACE"])
def test_unlisted_methods_get_the_router_405_with_cors(method):
    client = _client()
    response = client.request(method, "/webhook", headers={"Origin": ORIGIN})
    assert response.status_code == 405
    assert response.headers["Access-Control-Allow-Origin"] == ORIGIN
    if method != "HEAD":
        assert response.json() == {"error": "Method not allowed"}


def test_preflight_uses_cors_handler():
    client = _client()
    response = client.options("/webhook", headers={"Origin": ORIGIN})
    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == ORIGIN


def test_preflight_without_cors_is_not_allowed(monkeypatch):
    monkeypatch.setattr(webhooks_router, "get_default_cors_handler", lambda: None)
    client = TestClient(serve_webhook(WebhookConfig(secret=SECRET)))

    response = client.options("/webhook")

    assert response.status_code == 405
    assert "Access-Control-Allow-Origin" not in response.headers


def test_callback_failure_becomes_server_error():
    async def _explode(meeting_id, ctx):
        raise RuntimeError("email provider down")

    client = TestClient(
        serve_webhook(
            WebhookConfig(secret=SECRET, cors=create_cors_handler([ORIGIN]), on_meeting_processed=_explode)
        )
    )

    response = _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 7}})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_callback_receives_context_with_payload():
    seen = []

    async def _capture(meeting_id, ctx):
        seen.append((meeting_id, ctx.payload, ctx.cors_headers["Access-Control-Allow-Origin"]))

    client = TestClient(
        serve_webhook(
            WebhookConfig(secret=SECRET, cors=create_cors_handler([ORIGIN]), on_meeting_processed=_capture)
        )
    )
    _signed_post(client, {"event": "meeting.processed", "data": {"meeting_id": 12}})

    meeting_id, payload, allow_origin = seen[0]
    assert meeting_id == 12
    assert isinstance(payload, MeetingProcessedEvent)
    assert allow_origin == ORIGIN


def test_parse_webhook_payload_variants():
    assert isinstance(parse_webhook_payload('{"event": "meeting.processed", "data": {"meeting_id": 1}}'), MeetingProcessedEvent)
    unknown = parse_webhook_payload(b'{"event": "something.else"}')
    assert isinstance(unknown, UnknownWebhookEvent)
    assert unknown.data is None
    with pytest.raises(InvalidRequestError):
        parse_webhook_payload(b"\xff\xfe")
