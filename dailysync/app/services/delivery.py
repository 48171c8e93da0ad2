# dailysync/app/services/delivery.py
import logging

from dailysync.app.tasks.delivery_tasks import deliver_payload

logger = logging.getLogger(__name__)


def enqueue_delivery(endpoint_id: str, payload_log_id: str) -> bool:
    """
    Queue one delivery. Returns False (and logs) when the broker refuses it;
    the payload log is already stored, so the receiver still answers 202.
    """
    try:
        deliver_payload.delay(endpoint_id, payload_log_id)
        return True
    except Exception:
        logger.exception("Failed to enqueue delivery endpoint=%s payload=%s", endpoint_id, payload_log_id)
        return False
