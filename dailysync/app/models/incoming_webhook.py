from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin
from dailysync.app.models.enums import WebhookStatus


class IncomingWebhook(Base, IdMixin, TimestampMixin):
    """
    A public inbound address (``/webhook/<32 chars>``) that accepts payloads
    and fans them out to its outgoing endpoints.

    Supports:
    - optional shared secret (HMAC-SHA256 signature of the raw body)
    - ACTIVE / INACTIVE / PAUSED control without deleting
    """

    __tablename__ = "incoming_webhooks"

    # --------------------------------------
    # Ownership
    # --------------------------------------
    created_by: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    creator = relationship("User", back_populates="webhooks")

    # --------------------------------------
    # Configuration
    # --------------------------------------
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # generated once at creation, never updated
    url: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    type: Mapped[str] = mapped_column(String(50), nullable=False, default="GENERIC")
    secret: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[WebhookStatus] = mapped_column(
        Enum(WebhookStatus, native_enum=False, length=20),
        nullable=False,
        default=WebhookStatus.ACTIVE,
        index=True
    )

    # --------------------------------------
    # Relationships
    # --------------------------------------
    outgoing_endpoints = relationship(
        "OutgoingEndpoint",
        back_populates="incoming_webhook",
        cascade="all, delete-orphan"
    )

    payload_logs = relationship(
        "PayloadLog",
        back_populates="incoming_webhook",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_incoming_webhook_owner_status", "created_by", "status"),
    )

    def __repr__(self):
        return f"<IncomingWebhook id={self.id} url='{self.url}' status={self.status}>"
