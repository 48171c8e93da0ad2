import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class IdMixin:
    """
    Adds an opaque string primary key (UUID4) to a model.
    """
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
        index=True
    )


class TimestampMixin:
    """
    Adds created_at and updated_at timestamps.
    - created_at: set on insert
    - updated_at: refreshed on every ORM update
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )
