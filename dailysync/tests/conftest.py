import os

# must be set before the app modules build the engine and settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from dailysync.app import models  # noqa: F401
from dailysync.app.db import Base, SessionLocal, engine
from dailysync.app.main import app
from dailysync.app.models import IncomingWebhook, OutgoingEndpoint, Role, User, WebhookStatus
from dailysync.app.services.auth_service import create_access_token, hash_password


@pytest.fixture(autouse=True)
def no_network_calls(monkeypatch):
    """Block all external requests (safety)."""
    def blocked(*a, **kw):
        raise RuntimeError("NETWORK CALL BLOCKED IN TEST")

    monkeypatch.setattr("requests.post", blocked)
    monkeypatch.setattr("requests.get", blocked)
    monkeypatch.setattr("requests.put", blocked)
    monkeypatch.setattr("requests.delete", blocked)
    monkeypatch.setattr("requests.request", blocked)
    yield


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------
# Factories
# ---------------------------------------
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=Role.USER, name=None, email=None, password="password123", is_active=True):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@dailysync.io",
            hashed_password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN, name="Ada Admin", email="admin@dailysync.io")


@pytest.fixture
def agent(make_user):
    return make_user(name="Sam Agent", email="sam@dailysync.io")


@pytest.fixture
def other_agent(make_user):
    return make_user(name="Kai Agent", email="kai@dailysync.io")


@pytest.fixture
def make_webhook(db):
    counter = {"n": 0}

    def _make(owner, name=None, status=WebhookStatus.ACTIVE, secret=None, description=None):
        counter["n"] += 1
        n = counter["n"]
        webhook = IncomingWebhook(
            created_by=owner.id,
            name=name or f"Hook {n}",
            description=description,
            url=f"/webhook/test{n:028d}",
            secret=secret,
            status=status,
        )
        db.add(webhook)
        db.commit()
        return webhook

    return _make


@pytest.fixture
def make_endpoint(db):
    def _make(webhook, name="Target", url="https://hooks.dailysync.io/in", is_active=True, **kwargs):
        endpoint = OutgoingEndpoint(
            incoming_webhook_id=webhook.id,
            name=name,
            url=url,
            headers=kwargs.pop("headers", {}),
            is_active=is_active,
            **kwargs,
        )
        db.add(endpoint)
        db.commit()
        return endpoint

    return _make


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def today():
    return datetime.now(timezone.utc).date()
