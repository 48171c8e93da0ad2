# dailysync/app/services/webhook_service.py
"""
Incoming-webhook creation: caller bootstrap + unique URL allocation.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailysync.app.db import safe_commit, safe_rollback
from dailysync.app.models import IncomingWebhook, User
from dailysync.app.repositories.user_repository import UserRepository
from dailysync.app.repositories.webhook_repository import WebhookRepository
from dailysync.app.schemas.webhook import WebhookCreate
from dailysync.app.services.auth_service import SessionUser, unusable_password
from dailysync.app.services.url_allocator import (
    AllocationExhausted,
    allocate_unique,
    generate_webhook_url,
)
from dailysync.app.utils.errors import InternalError, ValidationFailed

logger = logging.getLogger(__name__)


def ensure_user(db: Session, session_user: SessionUser) -> User:
    """
    Return the caller's User row, creating it from the session claims when
    the identity provider knows the caller but this database does not yet.

    The row keeps the session's own role; nobody is promoted here.
    """
    users = UserRepository(db)
    user = users.get(session_user.id)
    if user:
        return user

    if not session_user.email:
        raise ValidationFailed("Session carries no email; cannot create user record")

    user = User(
        id=session_user.id,
        name=session_user.name or session_user.email.split("@")[0],
        email=session_user.email,
        hashed_password=unusable_password(),
        role=session_user.role,
        is_active=True,
    )
    db.add(user)
    try:
        safe_commit(db)
    except IntegrityError:
        # same email already registered under another id
        logger.info("User bootstrap conflict for session %s; falling back to email lookup", session_user.id)
        existing = users.get_by_email(session_user.email)
        if existing is None:
            raise
        logger.warning(
            "Session %s resolved to user %s by email; records it creates are owned by %s "
            "and are not visible to this session unless it is an admin",
            session_user.id, existing.id, existing.id,
        )
        return existing

    logger.info("Bootstrapped user %s from session claims", user.id)
    return user


def create_webhook(db: Session, owner: User, data: WebhookCreate) -> IncomingWebhook:
    webhooks = WebhookRepository(db)

    try:
        url = allocate_unique(generate_webhook_url, webhooks.url_exists)
    except AllocationExhausted as exc:
        logger.error("Webhook URL allocation failed after %s attempts", exc.attempts)
        raise InternalError("Failed to generate unique webhook URL")

    payload = data.model_dump()
    payload.update({"created_by": owner.id, "url": url})

    try:
        webhook = webhooks.create(payload)
    except IntegrityError:
        # lost the race between the existence check and the insert
        safe_rollback(db)
        logger.exception("Webhook insert hit the url unique index")
        raise InternalError("Failed to generate unique webhook URL")

    logger.info("Webhook %s created by %s", webhook.id, owner.id)
    return webhook
