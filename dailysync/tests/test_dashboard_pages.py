import pytest
from sqlalchemy.exc import OperationalError

from dailysync.app.models import User
from dailysync.app.repositories.user_repository import UserRepository
from dailysync.app.services.auth_service import create_access_token


def login_as(client, user):
    client.cookies.set("access_token", create_access_token(user))
    return client


@pytest.fixture
def admin_client(client, admin):
    return login_as(client, admin)


# ---------------------------------------
# session pages
# ---------------------------------------
def test_dashboard_requires_login(client):
    r = client.get("/dashboard", follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_login_form_sets_cookie_and_redirects(client, agent):
    r = client.post(
        "/login",
        data={"email": "sam@dailysync.io", "password": "password123"},
        follow_redirects=False,
    )

    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"
    assert "access_token" in r.cookies


def test_login_form_bad_credentials(client, agent):
    r = client.post("/login", data={"email": "sam@dailysync.io", "password": "wrong-one"})

    assert r.status_code == 401
    assert "Invalid email or password" in r.text


def test_logout_clears_cookie(client, agent):
    login_as(client, agent)
    r = client.post("/logout", follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_dashboard_renders_summary(client, agent):
    r = login_as(client, agent).get("/dashboard")

    assert r.status_code == 200
    assert "Last 7 days" in r.text
    assert "Your activity" in r.text


def test_deactivated_user_is_sent_to_login(client, db, agent):
    login_as(client, agent)
    agent.is_active = False
    db.commit()

    r = client.get("/dashboard", follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "/login"


# ---------------------------------------
# user management
# ---------------------------------------
def test_users_page_redirects_non_admin(client, agent):
    r = login_as(client, agent).get("/dashboard/users", follow_redirects=False)

    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"


def test_users_page_lists_users_and_stats(admin_client, agent, other_agent):
    r = admin_client.get("/dashboard/users")

    assert r.status_code == 200
    assert "sam@dailysync.io" in r.text
    assert "kai@dailysync.io" in r.text
    assert "Support agents" in r.text
    assert 'id="add-user-modal"' not in r.text


def test_users_page_search(admin_client, agent, other_agent):
    r = admin_client.get("/dashboard/users?search=kai")

    assert "kai@dailysync.io" in r.text
    assert "sam@dailysync.io" not in r.text


def test_users_page_pagination_links(admin_client, make_user):
    for _ in range(12):
        make_user()

    first = admin_client.get("/dashboard/users")
    second = admin_client.get("/dashboard/users?page=2")

    assert "Next" in first.text and "Previous" not in first.text
    assert "Previous" in second.text and "Next" not in second.text


def test_modal_opens_from_query(admin_client):
    r = admin_client.get("/dashboard/users?modal=open")
    assert 'id="add-user-modal"' in r.text


def test_create_user_success_redirects_with_notice(admin_client, db):
    r = admin_client.post(
        "/dashboard/users",
        data={"name": "Ola", "email": "ola@dailysync.io", "password": "longenough", "role": "USER"},
        follow_redirects=False,
    )

    assert r.status_code == 303
    assert "notice=User+created+successfully" in r.headers["location"]
    assert db.query(User).filter(User.email == "ola@dailysync.io").count() == 1


def test_create_user_missing_fields_keeps_modal_and_draft(admin_client):
    r = admin_client.post(
        "/dashboard/users",
        data={"name": "Draft Name", "email": "", "password": "secret-pass"},
    )

    assert r.status_code == 400
    assert "Please fill in all required fields." in r.text
    assert 'id="add-user-modal"' in r.text
    assert 'value="Draft Name"' in r.text
    assert "secret-pass" not in r.text


def test_create_user_conflict_keeps_modal_open(admin_client, agent):
    r = admin_client.post(
        "/dashboard/users",
        data={"name": "Sam 2", "email": "sam@dailysync.io", "password": "longenough"},
    )

    assert r.status_code == 409
    assert 'id="add-user-modal"' in r.text
    assert "already exists" in r.text


def test_deactivate_from_dashboard(admin_client, db, agent):
    r = admin_client.post(f"/dashboard/users/{agent.id}/deactivate", follow_redirects=False)

    assert r.status_code == 303
    assert "notice=User+deactivated+successfully" in r.headers["location"]
    db.expire_all()
    assert db.get(User, agent.id).is_active is False


def test_load_failure_shows_try_again(admin_client, monkeypatch):
    def broken(self, *a, **kw):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(UserRepository, "search", broken)

    r = admin_client.get("/dashboard/users?search=x")

    assert r.status_code == 200
    assert "Failed to load users" in r.text
    assert "Try Again" in r.text
    assert 'href="/dashboard/users?page=1&amp;search=x"' in r.text
