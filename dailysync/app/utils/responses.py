# dailysync/app/utils/responses.py

import math
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dailysync.app.config import settings
from dailysync.app.utils.errors import ValidationFailed

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def success(
    data: Any = None,
    *,
    message: str | None = None,
    pagination: dict | None = None,
    status_code: int = 200,
) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=CORS_HEADERS)


def failure(error: str, status_code: int, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=CORS_HEADERS)


# ---------------------------------------
# Pagination
# ---------------------------------------
def page_params(page: int | None, limit: int | None) -> tuple[int, int, int]:
    """
    Normalise page/limit query values. Returns (page, limit, offset).
    """
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else settings.DEFAULT_PAGE_SIZE
    limit = min(limit, settings.MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


# ---------------------------------------
# Body validation
# ---------------------------------------
def validate_body(schema, body: Any, message: str):
    """
    Validate a raw JSON body against a pydantic schema, raising
    ValidationFailed(message, details=errors) on failure.
    """
    try:
        return schema.model_validate(body)
    except ValidationError as exc:
        raise ValidationFailed(message, details=exc.errors(include_url=False, include_context=False)) from exc


def client_ip(request: Request) -> str | None:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None
