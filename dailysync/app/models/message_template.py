from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin


class MessageTemplate(Base, IdMixin, TimestampMixin):
    """
    Optional Jinja2 body for an outgoing endpoint. Rendered with the inbound
    payload as ``payload`` (parsed JSON when possible) and ``raw`` (the body text).
    """

    __tablename__ = "message_templates"

    endpoint_id: Mapped[str] = mapped_column(
        ForeignKey("outgoing_endpoints.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    endpoint = relationship("OutgoingEndpoint", back_populates="message_template")

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False, default="application/json")
