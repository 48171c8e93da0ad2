# dailysync/app/middleware/request_logger.py
import logging
import re
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from dailysync.app.utils.responses import client_ip

logger = logging.getLogger("dailysync.request")


_EMAIL_RE = re.compile(r"([a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+)")
_IP_RE = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
# inbound webhook slugs are bearer-like secrets
_WEBHOOK_SLUG_RE = re.compile(r"(/webhook/)[A-Za-z0-9]+")


def _redact(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    text = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    text = _IP_RE.sub("[REDACTED_IP]", text)
    text = _WEBHOOK_SLUG_RE.sub(r"\1[REDACTED]", text)
    return text


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    One log line per request: method, redacted path, status, duration and
    request id. Echoes ``X-Request-Id`` back, generating one when absent.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.time()

        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        request.state.request_id = request_id

        context = {
            "request_id": request_id,
            "method": request.method,
            "path": _redact(request.url.path),
            "query": _redact(request.url.query) or None,
            "client_ip": _redact(client_ip(request)),
        }

        try:
            response: Response = await call_next(request)
        except Exception:
            duration_ms = int((time.time() - start) * 1000)
            logger.exception(
                "%s %s 500 %sms req_id=%s",
                context["method"], context["path"], duration_ms, request_id,
                extra={**context, "status_code": 500, "duration_ms": duration_ms},
            )
            raise

        duration_ms = int((time.time() - start) * 1000)
        response.headers.setdefault("X-Request-Id", request_id)

        logger.info(
            "%s %s %s %sms req_id=%s",
            context["method"], context["path"], response.status_code, duration_ms, request_id,
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response
