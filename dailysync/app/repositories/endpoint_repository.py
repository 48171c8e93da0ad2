from sqlalchemy import func, select

from dailysync.app.models import DeliveryLog, MessageTemplate, OutgoingEndpoint
from dailysync.app.db import safe_commit
from .base import BaseRepository


class EndpointRepository(BaseRepository[OutgoingEndpoint]):
    def __init__(self, db):
        super().__init__(db, OutgoingEndpoint)

    def list_for_webhook(self, webhook_id: str):
        result = self.db.execute(
            select(OutgoingEndpoint)
            .where(OutgoingEndpoint.incoming_webhook_id == webhook_id)
            .order_by(OutgoingEndpoint.created_at.desc())
        )
        return result.scalars().all()

    def delivery_log_counts(self, endpoint_ids) -> dict[str, int]:
        if not endpoint_ids:
            return {}
        rows = self.db.execute(
            select(DeliveryLog.endpoint_id, func.count(DeliveryLog.id))
            .where(DeliveryLog.endpoint_id.in_(list(endpoint_ids)))
            .group_by(DeliveryLog.endpoint_id)
        ).all()
        return {endpoint_id: int(cnt) for endpoint_id, cnt in rows}

    def delivery_log_count(self, endpoint_id: str) -> int:
        return self.delivery_log_counts([endpoint_id]).get(endpoint_id, 0)

    def set_template(self, endpoint: OutgoingEndpoint, template_data: dict | None) -> OutgoingEndpoint:
        """
        Create, replace or (with None) remove the endpoint's message template.
        """
        if template_data is None:
            endpoint.message_template = None
        elif endpoint.message_template is None:
            endpoint.message_template = MessageTemplate(**template_data)
        else:
            for field, value in template_data.items():
                setattr(endpoint.message_template, field, value)
        self.db.add(endpoint)
        safe_commit(self.db)
        self.db.refresh(endpoint)
        return endpoint
