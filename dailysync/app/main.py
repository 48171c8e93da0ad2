# dailysync/app/main.py
"""
FastAPI application entrypoint.

- App factory (create_app) for tests
- CORS + request logging middleware
- JSON envelope for every error
- /health and Prometheus /metrics
- Use: uvicorn dailysync.app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException

from dailysync.app.config import settings
from dailysync.app.db import init_db
from dailysync.app.middleware.cors import add_cors
from dailysync.app.middleware.request_logger import RequestLoggerMiddleware
from dailysync.app.routers import (
    analytics,
    auth,
    dashboard,
    endpoints,
    inbound,
    reports,
    users,
    webhooks,
)
from dailysync.app.utils.errors import ApiError
from dailysync.app.utils.responses import failure

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return failure(exc.detail, exc.status_code, exc.details)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return failure(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return failure("Invalid request data", 400, details)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return failure("Internal server error", 500)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Daily activity reports, meeting reports, webhook integrations and analytics",
        version=settings.APP_VERSION,
    )

    # ---------------------
    # Middleware (last added runs first)
    # ---------------------
    add_cors(app)
    app.add_middleware(RequestLoggerMiddleware)

    register_exception_handlers(app)

    # ---------------------
    # Routers
    # ---------------------
    for module in (auth, analytics, webhooks, endpoints, users, reports, inbound, dashboard):
        app.include_router(module.router)
    logger.info("Routers included: %s", len(app.routes))

    # ---------------------
    # Metrics & health
    # ---------------------
    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": settings.APP_NAME, "version": app.version}

    @app.on_event("startup")
    def _startup():
        if settings.CREATE_TABLES_ON_STARTUP:
            init_db()
            logger.info("Database tables ensured")

    return app


app = create_app()
