from sqlalchemy import select

from dailysync.app.models import DailyReport, MeetingReport
from .base import BaseRepository


class DailyReportRepository(BaseRepository[DailyReport]):
    def __init__(self, db):
        super().__init__(db, DailyReport)

    def list_scoped(self, scope, offset: int = 0, limit: int = 10):
        """
        Reports visible under ``scope``, newest date first. Returns (rows, total).
        """
        total = self.count(scope)
        stmt = (
            select(DailyReport)
            .where(scope)
            .order_by(DailyReport.date.desc(), DailyReport.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return self.db.execute(stmt).scalars().all(), total


class MeetingReportRepository(BaseRepository[MeetingReport]):
    def __init__(self, db):
        super().__init__(db, MeetingReport)

    def list_scoped(self, scope, offset: int = 0, limit: int = 10):
        total = self.count(scope)
        stmt = (
            select(MeetingReport)
            .where(scope)
            .order_by(MeetingReport.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return self.db.execute(stmt).scalars().all(), total
