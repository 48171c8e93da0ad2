# dailysync/app/utils/errors.py
"""
API error taxonomy.

Every class is an ``HTTPException`` so handlers raise them the same way they
raise FastAPI's own; ``main.py`` renders all of them into the
``{success: false, error, details?}`` envelope.
"""

from typing import Any

from fastapi import HTTPException, status


class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)
        self.details = details


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
