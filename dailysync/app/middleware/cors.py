# dailysync/app/middleware/cors.py

"""
CORS for the JSON API.

Two layers:
- ``PreflightMiddleware`` answers every ``OPTIONS`` request itself with 200
  and the fixed CORS headers, and stamps the same headers on ``/api``
  responses.
- Starlette's ``CORSMiddleware`` handles cross-origin simple requests for
  the configured origins.

Environment variable:
    CORS_ALLOW_ORIGINS="http://localhost:3000,https://yourdomain.com"
"""

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dailysync.app.config import settings
from dailysync.app.utils.responses import CORS_HEADERS

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]


class PreflightMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        if request.url.path.startswith("/api"):
            for key, value in CORS_HEADERS.items():
                response.headers[key] = value
        return response


def add_cors(app):
    """
    Attach both CORS layers. The preflight layer is added after
    CORSMiddleware so it wraps it and sees OPTIONS first.
    """
    allow_origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["*"],
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-Id"],
        max_age=86400,
    )
    app.add_middleware(PreflightMiddleware)
