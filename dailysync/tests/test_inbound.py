import asyncio
import hashlib
import hmac
import json

import pytest

from dailysync.app.models import PayloadLog, WebhookStatus


@pytest.fixture
def queued(monkeypatch):
    calls = []

    def fake_enqueue(endpoint_id, payload_log_id):
        calls.append((endpoint_id, payload_log_id))
        return True

    monkeypatch.setattr("dailysync.app.routers.inbound.enqueue_delivery", fake_enqueue)
    return calls


def sign(secret: str, body: bytes) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def test_unknown_url_is_404(client, queued):
    r = client.post("/webhook/doesnotexist", json={"a": 1})

    assert r.status_code == 404
    assert r.json()["error"] == "Webhook not found"


def test_paused_webhook_is_409(client, agent, make_webhook, queued):
    hook = make_webhook(agent, status=WebhookStatus.PAUSED)
    r = client.post(hook.url, json={"a": 1})
    assert r.status_code == 409


def test_accepts_and_fans_out_to_active_endpoints(client, db, agent, make_webhook, make_endpoint, queued):
    hook = make_webhook(agent)
    on = make_endpoint(hook, name="on")
    make_endpoint(hook, name="off", is_active=False)

    r = client.post(hook.url, json={"event": "order.created"}, headers={"Authorization": "Bearer x"})
    data = r.json()["data"]

    assert r.status_code == 202
    assert data["endpoints"] == 1
    assert queued == [(on.id, data["payloadLogId"])]

    log = db.get(PayloadLog, data["payloadLogId"])
    assert json.loads(log.payload) == {"event": "order.created"}
    assert "authorization" not in {k.lower() for k in log.headers}


def test_secret_requires_valid_signature(client, agent, make_webhook, queued):
    hook = make_webhook(agent, secret="topsecret")
    body = json.dumps({"a": 1}).encode()

    missing = client.post(hook.url, content=body)
    wrong = client.post(hook.url, content=body, headers={"X-Webhook-Signature": sign("nope", body)})
    good = client.post(hook.url, content=body, headers={"X-Webhook-Signature": sign("topsecret", body)})

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert good.status_code == 202


def test_broker_failure_still_accepts_payload(client, agent, make_webhook, make_endpoint, monkeypatch):
    hook = make_webhook(agent)
    make_endpoint(hook)
    monkeypatch.setattr("dailysync.app.routers.inbound.enqueue_delivery", lambda *a: False)

    r = client.post(hook.url, json={"a": 1})
    assert r.status_code == 202


def test_enqueue_runs_off_the_event_loop(client, agent, make_webhook, make_endpoint, monkeypatch):
    hook = make_webhook(agent)
    make_endpoint(hook)
    loops = []

    def enqueue(endpoint_id, payload_log_id):
        try:
            loops.append(asyncio.get_running_loop())
        except RuntimeError:
            loops.append(None)
        return True

    monkeypatch.setattr("dailysync.app.routers.inbound.enqueue_delivery", enqueue)

    r = client.post(hook.url, json={"a": 1})

    assert r.status_code == 202
    assert loops == [None]
