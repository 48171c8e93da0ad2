from pydantic import Field, field_validator

from dailysync.app.models.enums import WebhookStatus
from .base import ApiModel, ORMBase, reject_null


class WebhookCreate(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    type: str = Field("GENERIC", min_length=1, max_length=50)
    secret: str | None = Field(None, max_length=255)
    status: WebhookStatus = WebhookStatus.ACTIVE


class WebhookUpdate(ApiModel):
    """
    Partial update: only keys present in the request body are applied
    (``model_dump(exclude_unset=True)``). ``url`` and ``createdBy`` are not
    updatable and are ignored if sent.
    """
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    type: str | None = Field(None, min_length=1, max_length=50)
    secret: str | None = Field(None, max_length=255)
    status: WebhookStatus | None = None

    @field_validator("name", "type", "status", mode="before")
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)


class CreatorOut(ApiModel):
    id: str
    name: str
    email: str


class WebhookCounts(ApiModel):
    payload_logs: int = 0


class WebhookOut(ORMBase):
    created_by: str
    name: str
    description: str | None = None
    url: str
    type: str
    secret: str | None = None
    status: WebhookStatus
    creator: CreatorOut | None = None
    counts: WebhookCounts = Field(default_factory=WebhookCounts, serialization_alias="_count")


def webhook_to_api(webhook, payload_logs: int = 0) -> dict:
    out = WebhookOut.model_validate(webhook)
    out.counts = WebhookCounts(payload_logs=payload_logs)
    return out.dump()
