from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin


class PayloadLog(Base, IdMixin, TimestampMixin):
    """
    Append-only record of one payload received by an incoming webhook.
    """

    __tablename__ = "payload_logs"

    incoming_webhook_id: Mapped[str] = mapped_column(
        ForeignKey("incoming_webhooks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    incoming_webhook = relationship("IncomingWebhook", back_populates="payload_logs")

    payload: Mapped[str] = mapped_column(Text, nullable=False)
    headers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # IPv4 + IPv6
    source_ip: Mapped[str | None] = mapped_column(String(45), nullable=True)

    delivery_logs = relationship("DeliveryLog", back_populates="payload_log")
