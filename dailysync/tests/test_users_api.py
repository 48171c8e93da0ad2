from dailysync.app.models import User
from dailysync.tests.conftest import auth_headers


def test_list_users_paginated(client, admin, make_user):
    for _ in range(4):
        make_user()

    r = client.get("/api/users?page=1&limit=2", headers=auth_headers(admin))
    data = r.json()["data"]

    assert r.status_code == 200
    assert len(data["users"]) == 2
    assert data["pagination"]["total"] == 5
    assert data["pagination"]["totalPages"] == 3
    assert data["pagination"]["hasNext"] is True
    assert "hashedPassword" not in data["users"][0]


def test_list_users_search(client, admin, agent, other_agent):
    r = client.get("/api/users?search=KAI", headers=auth_headers(admin))
    assert [u["email"] for u in r.json()["data"]["users"]] == ["kai@dailysync.io"]


def test_list_users_requires_admin(client, agent):
    assert client.get("/api/users", headers=auth_headers(agent)).status_code == 403


def test_create_user(client, admin):
    r = client.post(
        "/api/users",
        json={"name": "Nia", "email": "Nia@DailySync.io", "password": "longenough", "role": "ADMIN"},
        headers=auth_headers(admin),
    )
    data = r.json()["data"]

    assert r.status_code == 201
    assert data["email"] == "nia@dailysync.io"
    assert data["role"] == "ADMIN"
    assert data["isActive"] is True


def test_create_user_duplicate_email(client, admin, agent):
    r = client.post(
        "/api/users",
        json={"name": "Sam again", "email": "sam@dailysync.io", "password": "longenough"},
        headers=auth_headers(admin),
    )

    assert r.status_code == 409
    assert r.json()["success"] is False


def test_create_user_short_password(client, admin):
    r = client.post(
        "/api/users",
        json={"name": "Short", "email": "short@dailysync.io", "password": "123"},
        headers=auth_headers(admin),
    )

    assert r.status_code == 400
    assert r.json()["error"] == "Invalid user data"


def test_get_user_self_or_admin(client, admin, agent, other_agent):
    assert client.get(f"/api/users/{agent.id}", headers=auth_headers(agent)).status_code == 200
    assert client.get(f"/api/users/{agent.id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/api/users/{agent.id}", headers=auth_headers(other_agent)).status_code == 403


def test_get_unknown_user(client, admin):
    r = client.get("/api/users/nope", headers=auth_headers(admin))
    assert r.status_code == 404


def test_delete_is_soft(client, db, admin, agent):
    r = client.delete(f"/api/users/{agent.id}", headers=auth_headers(admin))

    assert r.status_code == 200
    assert r.json()["data"]["isActive"] is False
    db.expire_all()
    assert db.get(User, agent.id).is_active is False


def test_admin_cannot_deactivate_self(client, admin):
    r = client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))

    assert r.status_code == 400
    assert r.json()["error"] == "You cannot deactivate your own account"
