from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin


class OutgoingEndpoint(Base, IdMixin, TimestampMixin):
    """
    Destination called for every payload received by the parent incoming
    webhook. Carries its own retry policy (attempts, delay, timeout).
    """

    __tablename__ = "outgoing_endpoints"

    incoming_webhook_id: Mapped[str] = mapped_column(
        ForeignKey("incoming_webhooks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    incoming_webhook = relationship("IncomingWebhook", back_populates="outgoing_endpoints")

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False, default="POST")
    headers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # --------------------------------------
    # Retry policy
    # --------------------------------------
    retry_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    retry_delay_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    timeout_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=30000)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    message_template = relationship(
        "MessageTemplate",
        back_populates="endpoint",
        uselist=False,
        cascade="all, delete-orphan"
    )

    delivery_logs = relationship(
        "DeliveryLog",
        back_populates="endpoint",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<OutgoingEndpoint id={self.id} {self.method} '{self.url}' active={self.is_active}>"
