# dailysync/app/routers/endpoints.py

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from dailysync.app.db import get_db
from dailysync.app.models import OutgoingEndpoint
from dailysync.app.repositories.endpoint_repository import EndpointRepository
from dailysync.app.repositories.webhook_repository import WebhookRepository
from dailysync.app.schemas.endpoint import (
    REQUIRED_CREATE_FIELDS,
    EndpointCreate,
    EndpointUpdate,
    endpoint_to_api,
)
from dailysync.app.services.access import ensure_owner
from dailysync.app.services.auth_service import SessionUser, get_session_user
from dailysync.app.utils.errors import NotFound, ValidationFailed
from dailysync.app.utils.responses import success, validate_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/endpoints", tags=["Endpoints"])


def _check_webhook_access(db: Session, user: SessionUser, webhook_id: str) -> None:
    webhook = WebhookRepository(db).get(webhook_id)
    if not webhook:
        raise NotFound("Webhook not found")
    ensure_owner(user, webhook.created_by)


def _owned_endpoint(repo: EndpointRepository, user: SessionUser, endpoint_id: str) -> OutgoingEndpoint:
    """Ownership is inherited from the parent webhook."""
    endpoint = repo.get(endpoint_id)
    if not endpoint:
        raise NotFound("Endpoint not found")
    ensure_owner(user, endpoint.incoming_webhook.created_by)
    return endpoint


# ---------------------------------------
# GET /api/endpoints?webhookId=
# ---------------------------------------
@router.get("")
def list_endpoints(
    webhook_id: Optional[str] = Query(None, alias="webhookId"),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if not webhook_id:
        raise ValidationFailed("webhookId query parameter is required")

    _check_webhook_access(db, user, webhook_id)

    repo = EndpointRepository(db)
    endpoints = repo.list_for_webhook(webhook_id)
    counts = repo.delivery_log_counts([e.id for e in endpoints])
    return success([endpoint_to_api(e, counts.get(e.id, 0)) for e in endpoints])


# ---------------------------------------
# POST /api/endpoints
# ---------------------------------------
@router.post("")
def create_endpoint(
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    if any(not body.get(field) for field in REQUIRED_CREATE_FIELDS):
        raise ValidationFailed(f"Missing required fields: {', '.join(REQUIRED_CREATE_FIELDS)}")

    _check_webhook_access(db, user, str(body["incomingWebhookId"]))

    data = validate_body(EndpointCreate, body, "Invalid endpoint data")
    repo = EndpointRepository(db)

    endpoint = repo.create(data.model_dump(exclude={"message_template"}))
    if data.message_template is not None:
        endpoint = repo.set_template(endpoint, data.message_template.model_dump())

    logger.info("Endpoint %s created for webhook %s", endpoint.id, endpoint.incoming_webhook_id)
    return success(endpoint_to_api(endpoint), message="Endpoint created successfully", status_code=201)


# ---------------------------------------
# GET /api/endpoints/{id}
# ---------------------------------------
@router.get("/{endpoint_id}")
def get_endpoint(
    endpoint_id: str,
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    repo = EndpointRepository(db)
    endpoint = _owned_endpoint(repo, user, endpoint_id)
    return success(endpoint_to_api(endpoint, repo.delivery_log_count(endpoint.id), include_webhook=True))


# ---------------------------------------
# PUT /api/endpoints/{id}
# ---------------------------------------
@router.put("/{endpoint_id}")
def update_endpoint(
    endpoint_id: str,
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    repo = EndpointRepository(db)
    endpoint = _owned_endpoint(repo, user, endpoint_id)

    data = validate_body(EndpointUpdate, body, "Invalid endpoint data")
    changes = data.model_dump(exclude_unset=True)

    if "message_template" in changes:
        endpoint = repo.set_template(endpoint, changes.pop("message_template"))
    if changes:
        endpoint = repo.update(endpoint, changes)

    return success(
        endpoint_to_api(endpoint, repo.delivery_log_count(endpoint.id)),
        message="Endpoint updated successfully",
    )


# ---------------------------------------
# DELETE /api/endpoints/{id}
# ---------------------------------------
@router.delete("/{endpoint_id}")
def delete_endpoint(
    endpoint_id: str,
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    repo = EndpointRepository(db)
    endpoint = _owned_endpoint(repo, user, endpoint_id)
    repo.delete(endpoint)
    logger.info("Endpoint %s deleted by %s", endpoint_id, user.id)
    return success(message="Endpoint deleted successfully")
