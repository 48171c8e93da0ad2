from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin
from dailysync.app.models.enums import MeetingOutcome


class MeetingReport(Base, IdMixin, TimestampMixin):
    __tablename__ = "meeting_reports"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user = relationship("User", back_populates="meeting_reports")

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    outcome: Mapped[MeetingOutcome] = mapped_column(
        Enum(MeetingOutcome, native_enum=False, length=30),
        nullable=False,
        default=MeetingOutcome.COMPLETED,
        index=True
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self):
        return f"<MeetingReport id={self.id} user={self.user_id} outcome={self.outcome}>"
