# dailysync/app/models/__init__.py

from dailysync.app.db import Base

# -----------------------------------
# Users & reports
# -----------------------------------
from .user import User
from .daily_report import DailyReport
from .meeting_report import MeetingReport

# -----------------------------------
# Webhooks
# -----------------------------------
from .incoming_webhook import IncomingWebhook
from .outgoing_endpoint import OutgoingEndpoint
from .message_template import MessageTemplate
from .payload_log import PayloadLog
from .delivery_log import DeliveryLog

from .enums import DeliveryStatus, MeetingOutcome, Role, WebhookStatus

__all__ = [
    "Base",
    "User",
    "DailyReport",
    "MeetingReport",
    "IncomingWebhook",
    "OutgoingEndpoint",
    "MessageTemplate",
    "PayloadLog",
    "DeliveryLog",
    "DeliveryStatus",
    "MeetingOutcome",
    "Role",
    "WebhookStatus",
]
