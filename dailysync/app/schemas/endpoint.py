from typing import Any

from pydantic import Field, field_validator

from .base import ApiModel, ORMBase, reject_null

HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE"}
REQUIRED_CREATE_FIELDS = ("incomingWebhookId", "name", "url")


def _check_method(value: str) -> str:
    method = value.upper()
    if method not in HTTP_METHODS:
        raise ValueError(f"method must be one of {', '.join(sorted(HTTP_METHODS))}")
    return method


def _check_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError("url must start with http:// or https://")
    return value


class MessageTemplateIn(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)
    content_type: str = Field("application/json", max_length=100)


class EndpointCreate(ApiModel):
    incoming_webhook_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=1024)
    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    retry_attempts: int = Field(3, ge=0, le=10)
    retry_delay_ms: int = Field(1000, ge=0)
    timeout_ms: int = Field(30000, ge=1)
    message_template: MessageTemplateIn | None = None

    @field_validator("method")
    @classmethod
    def normalise_method(cls, value):
        return _check_method(value)

    @field_validator("url")
    @classmethod
    def http_url(cls, value):
        return _check_url(value)


class EndpointUpdate(ApiModel):
    """
    Partial update over name, url, method, headers, isActive and the retry
    policy. ``messageTemplate: null`` removes the template.
    """
    name: str | None = Field(None, min_length=1, max_length=255)
    url: str | None = Field(None, min_length=1, max_length=1024)
    method: str | None = None
    headers: dict[str, str] | None = None
    is_active: bool | None = None
    retry_attempts: int | None = Field(None, ge=0, le=10)
    retry_delay_ms: int | None = Field(None, ge=0)
    timeout_ms: int | None = Field(None, ge=1)
    message_template: MessageTemplateIn | None = None

    @field_validator(
        "name", "url", "method", "headers", "is_active",
        "retry_attempts", "retry_delay_ms", "timeout_ms",
        mode="before",
    )
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)

    @field_validator("method")
    @classmethod
    def normalise_method(cls, value):
        return _check_method(value)

    @field_validator("url")
    @classmethod
    def http_url(cls, value):
        return _check_url(value)


class MessageTemplateOut(ORMBase):
    name: str
    body: str
    content_type: str


class WebhookRefOut(ApiModel):
    id: str
    name: str
    created_by: str


class EndpointCounts(ApiModel):
    delivery_logs: int = 0


class EndpointOut(ORMBase):
    incoming_webhook_id: str
    name: str
    url: str
    method: str
    headers: dict[str, Any]
    retry_attempts: int
    retry_delay_ms: int
    timeout_ms: int
    is_active: bool
    message_template: MessageTemplateOut | None = None
    counts: EndpointCounts = Field(default_factory=EndpointCounts, serialization_alias="_count")


def endpoint_to_api(endpoint, delivery_logs: int = 0, include_webhook: bool = False) -> dict:
    out = EndpointOut.model_validate(endpoint)
    out.counts = EndpointCounts(delivery_logs=delivery_logs)
    data = out.dump()
    if include_webhook:
        data["incomingWebhook"] = WebhookRefOut.model_validate(endpoint.incoming_webhook).dump()
    return data
