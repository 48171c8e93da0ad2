import enum


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class WebhookStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PAUSED = "PAUSED"


class MeetingOutcome(str, enum.Enum):
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    FOLLOW_UP_REQUIRED = "FOLLOW_UP_REQUIRED"


class DeliveryStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    RETRYING = "RETRYING"
