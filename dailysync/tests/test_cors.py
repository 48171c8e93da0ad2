from fastapi.testclient import TestClient

from dailysync.app.main import app

EXPECTED = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, Authorization",
}


def _cors(headers) -> dict:
    return {k: headers.get(k) for k in EXPECTED}


def test_options_answers_200_with_cors_headers(client):
    for path in ("/api/webhooks", "/api/endpoints/abc", "/api/analytics/dashboard"):
        r = client.options(path)
        assert r.status_code == 200
        assert _cors(r.headers) == EXPECTED


def test_browser_preflight(client):
    r = client.options(
        "/api/webhooks",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )

    assert r.status_code == 200
    assert _cors(r.headers) == EXPECTED


def test_api_errors_carry_cors_headers(client):
    r = client.get("/api/webhooks")

    assert r.status_code == 401
    assert _cors(r.headers) == EXPECTED


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nothing-here")

    assert r.status_code == 404
    assert r.json()["success"] is False


def test_request_id_echoed(client):
    r = client.get("/health", headers={"X-Request-Id": "abc123"})
    assert r.headers["x-request-id"] == "abc123"


def test_health_and_metrics(client):
    assert client.get("/health").json()["status"] == "ok"

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "dailysync_db_commit_total" in metrics.text


def test_unhandled_error_becomes_500_envelope(monkeypatch, admin):
    from dailysync.app.services import analytics
    from dailysync.tests.conftest import auth_headers

    def explode(db, user):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(analytics, "webhook_analytics", explode)
    client = TestClient(app, raise_server_exceptions=False)

    r = client.get("/api/analytics/webhook-analytics", headers=auth_headers(admin))

    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Internal server error"}
