from datetime import timedelta

from dailysync.app.models import Role
from dailysync.app.services.auth_service import SessionUser, create_access_token
from dailysync.tests.conftest import auth_headers


def test_login_returns_token_and_sets_cookie(client, agent):
    r = client.post("/api/auth/login", json={"email": "sam@dailysync.io", "password": "password123"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["tokenType"] == "bearer"
    assert body["data"]["user"]["email"] == "sam@dailysync.io"
    assert "hashedPassword" not in body["data"]["user"]
    assert "access_token" in r.cookies


def test_login_email_is_case_insensitive(client, agent):
    r = client.post("/api/auth/login", json={"email": "SAM@dailysync.io", "password": "password123"})
    assert r.status_code == 200


def test_login_wrong_password(client, agent):
    r = client.post("/api/auth/login", json={"email": "sam@dailysync.io", "password": "nope-nope"})

    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid email or password"}


def test_login_inactive_account(client, make_user):
    make_user(email="gone@dailysync.io", is_active=False)
    r = client.post("/api/auth/login", json={"email": "gone@dailysync.io", "password": "password123"})
    assert r.status_code == 403


def test_login_invalid_body(client):
    r = client.post("/api/auth/login", json={"email": "not-an-email"})

    assert r.status_code == 400
    assert r.json()["error"] == "Invalid login data"
    assert r.json()["details"]


def test_missing_token_is_unauthorized(client):
    r = client.get("/api/analytics/daily-reports")

    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Unauthorized"}


def test_malformed_token_is_unauthorized(client):
    r = client.get("/api/analytics/daily-reports", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401


def test_expired_token_is_unauthorized(client, agent):
    token = create_access_token(agent, expires_delta=timedelta(seconds=-5))
    r = client.get("/api/analytics/daily-reports", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_inactive_claim_is_forbidden(client):
    ghost = SessionUser(id="u-1", role=Role.USER, is_active=False, email="g@dailysync.io", name="G")
    r = client.get("/api/analytics/daily-reports", headers=auth_headers(ghost))

    assert r.status_code == 403
    assert r.json()["error"] == "Account is inactive or suspended"


def test_deactivated_user_loses_access_with_live_token(client, db, agent):
    headers = auth_headers(agent)
    assert client.get("/api/daily-reports", headers=headers).status_code == 200

    agent.is_active = False
    db.commit()

    r = client.get("/api/daily-reports", headers=headers)
    assert r.status_code == 403
    assert r.json()["error"] == "Account is inactive or suspended"


def test_cookie_session_is_accepted(client, agent):
    client.cookies.set("access_token", create_access_token(agent))
    r = client.get("/api/analytics/daily-reports")
    assert r.status_code == 200


def test_admin_routes_reject_regular_users(client, agent):
    r = client.get("/api/analytics/user-performance", headers=auth_headers(agent))

    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden - Admin access required"
