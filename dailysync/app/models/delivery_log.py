from sqlalchemy import Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin
from dailysync.app.models.enums import DeliveryStatus


class DeliveryLog(Base, IdMixin, TimestampMixin):
    """
    Append-only record of one delivery attempt to an outgoing endpoint.
    """

    __tablename__ = "delivery_logs"

    endpoint_id: Mapped[str] = mapped_column(
        ForeignKey("outgoing_endpoints.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    endpoint = relationship("OutgoingEndpoint", back_populates="delivery_logs")

    payload_log_id: Mapped[str | None] = mapped_column(
        ForeignKey("payload_logs.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    payload_log = relationship("PayloadLog", back_populates="delivery_logs")

    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, native_enum=False, length=20),
        nullable=False,
        default=DeliveryStatus.PENDING,
        index=True
    )

    response_status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    response_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_delivery_endpoint_status", "endpoint_id", "status"),
    )
