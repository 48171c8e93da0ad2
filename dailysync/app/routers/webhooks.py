# dailysync/app/routers/webhooks.py

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from dailysync.app.db import get_db
from dailysync.app.models import IncomingWebhook
from dailysync.app.repositories.webhook_repository import WebhookRepository
from dailysync.app.schemas.webhook import WebhookCreate, WebhookUpdate, webhook_to_api
from dailysync.app.services.access import ensure_owner, owner_clause
from dailysync.app.services.auth_service import SessionUser, get_current_admin, get_session_user
from dailysync.app.services.webhook_service import create_webhook, ensure_user
from dailysync.app.utils.errors import NotFound
from dailysync.app.utils.responses import build_pagination, page_params, success, validate_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


def _owned_webhook(repo: WebhookRepository, user: SessionUser, webhook_id: str) -> IncomingWebhook:
    webhook = repo.get(webhook_id)
    if not webhook:
        raise NotFound("Webhook not found")
    ensure_owner(user, webhook.created_by)
    return webhook


# ---------------------------------------
# GET /api/webhooks (admin)
# ---------------------------------------
@router.get("")
def list_webhooks(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: str = Query(""),
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Paginated webhook list, newest first, with creator and payload log count.
    """
    page, limit, offset = page_params(page, limit)
    repo = WebhookRepository(db)

    rows, total = repo.search(owner_clause(admin, IncomingWebhook.created_by), search.strip(), offset, limit)
    counts = repo.payload_log_counts([w.id for w in rows])

    return success(
        [webhook_to_api(w, counts.get(w.id, 0)) for w in rows],
        pagination=build_pagination(page, limit, total),
    )


# ---------------------------------------
# POST /api/webhooks
# ---------------------------------------
@router.post("")
def create(
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    data = validate_body(WebhookCreate, body, "Invalid webhook data")
    owner = ensure_user(db, user)
    webhook = create_webhook(db, owner, data)
    return success(webhook_to_api(webhook), message="Webhook created successfully", status_code=201)


# ---------------------------------------
# GET /api/webhooks/{id}
# ---------------------------------------
@router.get("/{webhook_id}")
def get_webhook(
    webhook_id: str,
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    repo = WebhookRepository(db)
    webhook = _owned_webhook(repo, user, webhook_id)
    return success(webhook_to_api(webhook, repo.payload_log_count(webhook.id)))


# ---------------------------------------
# PUT /api/webhooks/{id}
# ---------------------------------------
@router.put("/{webhook_id}")
def update_webhook(
    webhook_id: str,
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    """
    Merge-patch: only keys present in the body change.
    """
    repo = WebhookRepository(db)
    webhook = _owned_webhook(repo, user, webhook_id)

    data = validate_body(WebhookUpdate, body, "Invalid webhook data")
    changes = data.model_dump(exclude_unset=True)
    if changes:
        webhook = repo.update(webhook, changes)
        logger.info("Webhook %s updated fields=%s", webhook.id, sorted(changes))

    return success(webhook_to_api(webhook, repo.payload_log_count(webhook.id)), message="Webhook updated successfully")
