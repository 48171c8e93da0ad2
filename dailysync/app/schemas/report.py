import datetime as dt

from pydantic import Field

from dailysync.app.models.enums import MeetingOutcome
from .base import ApiModel, ORMBase


class DailyReportCreate(ApiModel):
    date: dt.date | None = None
    tickets_resolved: int = Field(0, ge=0)
    chats_handled: int = Field(0, ge=0)
    github_issues: int = Field(0, ge=0)
    emails_processed: int = Field(0, ge=0)
    calls_attended: int = Field(0, ge=0)
    notes: str | None = None


class DailyReportOut(ORMBase):
    user_id: str
    date: dt.date
    tickets_resolved: int
    chats_handled: int
    github_issues: int
    emails_processed: int
    calls_attended: int
    notes: str | None = None


class MeetingReportCreate(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    outcome: MeetingOutcome = MeetingOutcome.COMPLETED
    notes: str | None = None


class MeetingReportOut(ORMBase):
    user_id: str
    title: str
    outcome: MeetingOutcome
    notes: str | None = None
