# dailysync/app/tasks/delivery_tasks.py

import json
import logging
import time
from typing import Optional

import requests
from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment
from prometheus_client import Counter

from dailysync.app.celery_app import celery_app
from dailysync.app.db import SessionLocal
from dailysync.app.models import DeliveryLog, DeliveryStatus, OutgoingEndpoint, PayloadLog
from dailysync.app.repositories.log_repository import DeliveryLogRepository

logger = logging.getLogger(__name__)

DELIVERY_ATTEMPTS = Counter(
    "dailysync_delivery_attempts_total",
    "Outgoing endpoint delivery attempts",
    ["status"]  # success | retrying | failed
)

# response bodies are stored for debugging only
RESPONSE_BODY_LIMIT = 2000

_template_env = SandboxedEnvironment(autoescape=False)


def render_body(endpoint: OutgoingEndpoint, raw_payload: str) -> tuple[str, str]:
    """
    Returns (body, content_type). Without a message template the inbound
    payload is forwarded unchanged as JSON.
    """
    template = endpoint.message_template
    if template is None:
        return raw_payload, "application/json"

    try:
        payload = json.loads(raw_payload)
    except ValueError:
        payload = raw_payload

    body = _template_env.from_string(template.body).render(payload=payload, raw=raw_payload)
    return body, template.content_type


def send_once(endpoint: OutgoingEndpoint, body: str, content_type: str):
    """
    Single HTTP attempt; retries are scheduled by the task.
    """
    headers = {"Content-Type": content_type}
    headers.update(endpoint.headers or {})
    return requests.request(
        endpoint.method,
        endpoint.url,
        data=body.encode("utf-8"),
        headers=headers,
        timeout=endpoint.timeout_ms / 1000,
    )


def attempt_delivery(db, endpoint: OutgoingEndpoint, payload_log: PayloadLog, attempt: int, final: bool) -> DeliveryLog:
    """
    Perform one attempt and record it as a DeliveryLog.

    SUCCESS on 2xx; otherwise RETRYING, or FAILED when ``final``.
    """
    start = time.time()
    response_status: Optional[int] = None
    response_body: Optional[str] = None
    error: Optional[str] = None

    try:
        body, content_type = render_body(endpoint, payload_log.payload)
        resp = send_once(endpoint, body, content_type)
        response_status = resp.status_code
        response_body = (resp.text or "")[:RESPONSE_BODY_LIMIT]
        if not 200 <= resp.status_code < 300:
            error = f"non-2xx response: {resp.status_code}"
    except TemplateError as e:
        error = f"template error: {e}"
    except requests.RequestException as e:
        error = str(e)[:RESPONSE_BODY_LIMIT]

    if error is None:
        status = DeliveryStatus.SUCCESS
    elif final:
        status = DeliveryStatus.FAILED
    else:
        status = DeliveryStatus.RETRYING

    DELIVERY_ATTEMPTS.labels(status=status.value.lower()).inc()

    return DeliveryLogRepository(db).create({
        "endpoint_id": endpoint.id,
        "payload_log_id": payload_log.id,
        "attempt": attempt,
        "status": status,
        "response_status": response_status,
        "response_body": response_body,
        "error": error,
        "duration_ms": int((time.time() - start) * 1000),
    })


@celery_app.task(
    bind=True,
    max_retries=None,
    name="delivery.deliver_payload",
)
def deliver_payload(self, endpoint_id: str, payload_log_id: str):
    """
    Deliver one received payload to one outgoing endpoint.

    The endpoint's own policy drives retries: ``retry_attempts`` extra
    attempts, ``retry_delay_ms`` apart. Returns True on success, False on
    permanent failure.
    """
    db = SessionLocal()
    try:
        endpoint = db.get(OutgoingEndpoint, endpoint_id)
        payload_log = db.get(PayloadLog, payload_log_id)
        if endpoint is None or payload_log is None:
            logger.warning("[DELIVERY] endpoint=%s payload=%s no longer exists", endpoint_id, payload_log_id)
            return False

        attempt = self.request.retries + 1
        final = attempt > endpoint.retry_attempts
        log = attempt_delivery(db, endpoint, payload_log, attempt, final)

        if log.status == DeliveryStatus.SUCCESS:
            logger.info("[DELIVERY] %s -> %s (attempt %s)", endpoint.url, log.response_status, attempt)
            return True

        if final:
            logger.error("[DELIVERY] PERMANENT FAILURE endpoint=%s err=%s", endpoint.id, log.error)
            return False

        delay = endpoint.retry_delay_ms / 1000
        logger.warning("[DELIVERY] Retry in %.1fs endpoint=%s err=%s", delay, endpoint.id, log.error)
        max_retries = endpoint.retry_attempts
    finally:
        db.close()

    raise self.retry(countdown=delay, max_retries=max_retries)
