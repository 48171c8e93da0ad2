import json
from typing import Any

from dailysync.app.models import DeliveryLog, PayloadLog
from .base import BaseRepository


class PayloadLogRepository(BaseRepository[PayloadLog]):
    def __init__(self, db):
        super().__init__(db, PayloadLog)

    def record(self, webhook_id: str, payload: Any, headers: dict, source_ip: str | None) -> PayloadLog:
        body = payload if isinstance(payload, str) else json.dumps(payload)
        return self.create({
            "incoming_webhook_id": webhook_id,
            "payload": body,
            "headers": headers,
            "source_ip": source_ip,
        })


class DeliveryLogRepository(BaseRepository[DeliveryLog]):
    def __init__(self, db):
        super().__init__(db, DeliveryLog)
