# dailysync/app/routers/inbound.py
"""
Public receiver for incoming webhooks.

    POST /webhook/<slug>
      (sync handler; the raw body is read by an async dependency)
      -> lookup by url -> status gate -> signature check (if secret)
      -> PayloadLog -> one queued delivery per active endpoint -> 202
"""

import hashlib
import hmac
import logging

from fastapi import APIRouter, Depends, Request
from prometheus_client import Counter
from sqlalchemy.orm import Session

from dailysync.app.config import settings
from dailysync.app.db import get_db
from dailysync.app.models import IncomingWebhook, WebhookStatus
from dailysync.app.repositories.log_repository import PayloadLogRepository
from dailysync.app.repositories.webhook_repository import WebhookRepository
from dailysync.app.services.delivery import enqueue_delivery
from dailysync.app.services.url_allocator import WEBHOOK_URL_PREFIX
from dailysync.app.utils.errors import Conflict, NotFound, Unauthorized
from dailysync.app.utils.responses import client_ip, success

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Inbound"])

INBOUND_PAYLOADS = Counter(
    "dailysync_inbound_payloads_total",
    "Payloads received on incoming webhook urls",
    ["result"]  # accepted | not_found | inactive | bad_signature
)

# never persisted with the payload log
_SENSITIVE_HEADERS = {"authorization", "cookie"}


def verify_signature(secret: str, body: bytes, header_value: str | None) -> bool:
    if not header_value or not header_value.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, header_value[len("sha256="):])


def _stored_headers(request: Request) -> dict:
    return {k: v for k, v in request.headers.items() if k.lower() not in _SENSITIVE_HEADERS}


async def raw_body(request: Request) -> bytes:
    return await request.body()


@router.post(WEBHOOK_URL_PREFIX + "{slug}")
def receive_payload(
    slug: str,
    request: Request,
    body: bytes = Depends(raw_body),
    db: Session = Depends(get_db),
):
    webhook: IncomingWebhook | None = WebhookRepository(db).get_by_url(WEBHOOK_URL_PREFIX + slug)
    if not webhook:
        INBOUND_PAYLOADS.labels(result="not_found").inc()
        raise NotFound("Webhook not found")

    if webhook.status != WebhookStatus.ACTIVE:
        INBOUND_PAYLOADS.labels(result="inactive").inc()
        raise Conflict("Webhook is not active")

    if webhook.secret:
        signature = request.headers.get(settings.WEBHOOK_SIGNATURE_HEADER)
        if not verify_signature(webhook.secret, body, signature):
            INBOUND_PAYLOADS.labels(result="bad_signature").inc()
            logger.warning("Rejected payload for webhook %s: bad signature", webhook.id)
            raise Unauthorized("Invalid webhook signature")

    payload_log = PayloadLogRepository(db).record(
        webhook.id,
        body.decode("utf-8", errors="replace"),
        _stored_headers(request),
        client_ip(request),
    )

    endpoints = WebhookRepository(db).active_endpoints(webhook.id)
    queued = sum(1 for e in endpoints if enqueue_delivery(e.id, payload_log.id))
    if queued < len(endpoints):
        logger.warning("Webhook %s: queued %s of %s deliveries", webhook.id, queued, len(endpoints))

    INBOUND_PAYLOADS.labels(result="accepted").inc()
    return success(
        {"payloadLogId": payload_log.id, "endpoints": len(endpoints)},
        message="Payload accepted",
        status_code=202,
    )
