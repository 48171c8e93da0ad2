from sqlalchemy import func, or_, select

from dailysync.app.models import IncomingWebhook, OutgoingEndpoint, PayloadLog
from .base import BaseRepository


class WebhookRepository(BaseRepository[IncomingWebhook]):
    def __init__(self, db):
        super().__init__(db, IncomingWebhook)

    def get_by_url(self, url: str):
        result = self.db.execute(select(IncomingWebhook).where(IncomingWebhook.url == url))
        return result.scalar_one_or_none()

    def url_exists(self, url: str) -> bool:
        return self.get_by_url(url) is not None

    def search(self, scope, search: str = "", offset: int = 0, limit: int = 10):
        """
        Paginated webhook list (newest first) under an access ``scope``
        predicate. Returns (webhooks, total).
        """
        criteria = [scope]
        if search:
            pattern = f"%{search}%"
            criteria.append(or_(
                IncomingWebhook.name.ilike(pattern),
                IncomingWebhook.description.ilike(pattern),
            ))

        total = self.count(*criteria)
        stmt = (
            select(IncomingWebhook)
            .where(*criteria)
            .order_by(IncomingWebhook.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return self.db.execute(stmt).scalars().all(), total

    def payload_log_counts(self, webhook_ids) -> dict[str, int]:
        if not webhook_ids:
            return {}
        rows = self.db.execute(
            select(PayloadLog.incoming_webhook_id, func.count(PayloadLog.id))
            .where(PayloadLog.incoming_webhook_id.in_(list(webhook_ids)))
            .group_by(PayloadLog.incoming_webhook_id)
        ).all()
        return {webhook_id: int(cnt) for webhook_id, cnt in rows}

    def payload_log_count(self, webhook_id: str) -> int:
        return self.payload_log_counts([webhook_id]).get(webhook_id, 0)

    def active_endpoints(self, webhook_id: str):
        result = self.db.execute(
            select(OutgoingEndpoint).where(
                OutgoingEndpoint.incoming_webhook_id == webhook_id,
                OutgoingEndpoint.is_active.is_(True),
            )
        )
        return result.scalars().all()
