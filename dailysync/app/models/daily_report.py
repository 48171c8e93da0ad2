import datetime as dt

from sqlalchemy import Date, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin


class DailyReport(Base, IdMixin, TimestampMixin):
    """
    One user's activity counts for one calendar day.

    Several reports for the same user and date are allowed; analytics treat
    each row as its own bucket.
    """

    __tablename__ = "daily_reports"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user = relationship("User", back_populates="daily_reports")

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    tickets_resolved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chats_handled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    github_issues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    emails_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    calls_attended: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_daily_report_user_date", "user_id", "date"),
    )

    def __repr__(self):
        return f"<DailyReport id={self.id} user={self.user_id} date={self.date}>"
