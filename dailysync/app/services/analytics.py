# dailysync/app/services/analytics.py
"""
Aggregate report and webhook metrics for the analytics endpoints.

Every query is scoped with ``owner_clause`` so a regular user only ever
aggregates their own rows. Averages and rates go through ``round2`` and
``safe_rate``: two decimals, and 0 (never NaN) on an empty denominator.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from dailysync.app.config import settings
from dailysync.app.models import (
    DailyReport,
    DeliveryLog,
    DeliveryStatus,
    IncomingWebhook,
    MeetingOutcome,
    MeetingReport,
    OutgoingEndpoint,
    PayloadLog,
    Role,
    User,
    WebhookStatus,
)
from dailysync.app.services.access import owner_clause
from dailysync.app.services.auth_service import SessionUser

logger = logging.getLogger(__name__)

# (wire name, column attribute)
METRICS = (
    ("Tickets", "tickets_resolved"),
    ("Chats", "chats_handled"),
    ("GithubIssues", "github_issues"),
    ("Emails", "emails_processed"),
    ("Calls", "calls_attended"),
)

RECENT_ACTIVITY_LIMIT = 10


# ---------------------------------------------------
# MATH HELPERS
# ---------------------------------------------------

def round2(value) -> float:
    """
    round(value * 100) / 100 with halves rounded away from zero.
    """
    if not value:
        return 0.0
    scaled = Decimal(str(float(value) * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled) / 100


def safe_rate(numerator, denominator) -> float:
    """numerator / denominator, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _iso_day(value) -> str:
    return value.isoformat()[:10]


# ---------------------------------------------------
# SHARED QUERIES
# ---------------------------------------------------

def _metric_stats(db: Session, criteria) -> tuple[dict, dict]:
    """
    Sums and averages of the five report counters under ``criteria``.
    Returns ({"Tickets": sum, ...}, {"Tickets": avg, ...}).
    """
    columns = []
    for _, attr in METRICS:
        col = getattr(DailyReport, attr)
        columns.append(func.coalesce(func.sum(col), 0))
        columns.append(func.avg(col))

    row = db.execute(select(*columns).where(*criteria)).one()

    sums, avgs = {}, {}
    for i, (name, _) in enumerate(METRICS):
        sums[name] = int(row[2 * i] or 0)
        avgs[name] = round2(row[2 * i + 1] or 0)
    return sums, avgs


def _count(db: Session, model, *criteria) -> int:
    return int(db.execute(select(func.count()).select_from(model).where(*criteria)).scalar() or 0)


def _report_counters(report) -> dict:
    return {
        "tickets": report.tickets_resolved,
        "chats": report.chats_handled,
        "githubIssues": report.github_issues,
        "emails": report.emails_processed,
        "calls": report.calls_attended,
    }


# ---------------------------------------------------
# /api/analytics/daily-reports
# ---------------------------------------------------

def daily_reports_summary(db: Session, user: SessionUser, now: Optional[datetime] = None) -> dict:
    now = _now(now)
    scope = owner_clause(user, DailyReport.user_id)

    end_date = now.date()
    start_date = end_date - timedelta(days=settings.ANALYTICS_DAILY_WINDOW_DAYS)
    breakdown_start = end_date - timedelta(days=settings.ANALYTICS_BREAKDOWN_DAYS)

    in_range = [scope, DailyReport.date > start_date, DailyReport.date <= end_date]

    report_count = _count(db, DailyReport, scope)
    reports_in_range = _count(db, DailyReport, *in_range)
    sums, avgs = _metric_stats(db, in_range)

    breakdown = db.execute(
        select(DailyReport)
        .options(joinedload(DailyReport.user))
        .where(scope, DailyReport.date > breakdown_start, DailyReport.date <= end_date)
        .order_by(DailyReport.date.desc())
    ).scalars().all()

    data = {
        "reportCount": report_count,
        "reportsInRange": reports_in_range,
    }
    for name, _ in METRICS:
        data[f"total{name}"] = sums[name]
    for name, _ in METRICS:
        data[f"average{name}"] = avgs[name]

    data["dailyData"] = [
        {
            "date": _iso_day(report.date),
            **_report_counters(report),
            "userName": report.user.name if report.user else None,
        }
        for report in breakdown
    ]
    return data


# ---------------------------------------------------
# /api/analytics/dashboard
# ---------------------------------------------------

def dashboard_summary(db: Session, user: SessionUser, now: Optional[datetime] = None) -> dict:
    now = _now(now)
    daily_scope = owner_clause(user, DailyReport.user_id)
    meeting_scope = owner_clause(user, MeetingReport.user_id)

    start = now - timedelta(days=settings.ANALYTICS_DASHBOARD_WINDOW_DAYS)
    daily_window = [daily_scope, DailyReport.date > start.date(), DailyReport.date <= now.date()]
    meeting_window = [meeting_scope, MeetingReport.created_at >= start, MeetingReport.created_at <= now]

    total_daily = _count(db, DailyReport, daily_scope)
    total_meetings = _count(db, MeetingReport, meeting_scope)

    recent_daily = db.execute(
        select(DailyReport)
        .options(joinedload(DailyReport.user))
        .where(*daily_window)
        .order_by(DailyReport.date.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    ).scalars().all()

    recent_meetings = db.execute(
        select(MeetingReport)
        .options(joinedload(MeetingReport.user))
        .where(*meeting_window)
        .order_by(MeetingReport.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    ).scalars().all()

    sums, avgs = _metric_stats(db, daily_window)

    outcome_rows = db.execute(
        select(MeetingReport.outcome, func.count(MeetingReport.id))
        .where(*meeting_window)
        .group_by(MeetingReport.outcome)
    ).all()
    outcome_stats = {
        (outcome.value if isinstance(outcome, MeetingOutcome) else str(outcome)): int(cnt)
        for outcome, cnt in outcome_rows
    }

    series = db.execute(
        select(DailyReport)
        .where(*daily_window)
        .order_by(DailyReport.date.asc())
    ).scalars().all()

    activity = [
        (report.created_at, {
            "id": report.id,
            "type": "daily_report_submitted",
            "user": report.user.name if report.user else "Unknown User",
            "timestamp": _as_utc(report.created_at).isoformat(),
            "description": f"Daily report submitted for {_iso_day(report.date)}",
        })
        for report in recent_daily
    ] + [
        (report.created_at, {
            "id": report.id,
            "type": "meeting_report_submitted",
            "user": report.user.name if report.user else "Unknown User",
            "timestamp": _as_utc(report.created_at).isoformat(),
            "description": f"Meeting report: {report.title}",
        })
        for report in recent_meetings
    ]
    activity.sort(key=lambda pair: _as_utc(pair[0]), reverse=True)

    user_stats = None
    if not user.is_admin:
        user_stats = {
            "dailyReportsThisMonth": _count(db, DailyReport, *daily_window),
            "meetingReportsThisMonth": _count(db, MeetingReport, *meeting_window),
            "totalTicketsResolved": sums["Tickets"],
            "totalChatsHandled": sums["Chats"],
        }

    daily_block = {"reportCount": total_daily}
    for name, _ in METRICS:
        daily_block[f"total{name}"] = sums[name]
    for name, _ in METRICS:
        daily_block[f"average{name}"] = avgs[name]

    return {
        "dailyReports": daily_block,
        "meetingReports": {
            "reportCount": total_meetings,
            "outcomeStats": outcome_stats,
        },
        "timeSeries": [
            {"date": _iso_day(report.date), **_report_counters(report)}
            for report in series
        ],
        "recentActivity": [item for _, item in activity[:RECENT_ACTIVITY_LIMIT]],
        "userStats": user_stats,
    }


# ---------------------------------------------------
# /api/analytics/user-performance  (admin)
# ---------------------------------------------------

def user_performance(db: Session) -> list[dict]:
    """
    Per active regular user: rollups over the most recent daily/meeting
    reports, sorted by total activity (highest first).
    """
    rollup = settings.ANALYTICS_ROLLUP_SIZE
    users = db.execute(
        select(User).where(User.is_active.is_(True), User.role == Role.USER)
    ).scalars().all()

    metrics = []
    for u in users:
        daily_count = _count(db, DailyReport, DailyReport.user_id == u.id)
        meeting_count = _count(db, MeetingReport, MeetingReport.user_id == u.id)

        reports = db.execute(
            select(DailyReport)
            .where(DailyReport.user_id == u.id)
            .order_by(DailyReport.date.desc())
            .limit(rollup)
        ).scalars().all()
        outcomes = db.execute(
            select(MeetingReport.outcome)
            .where(MeetingReport.user_id == u.id)
            .order_by(MeetingReport.created_at.desc())
            .limit(rollup)
        ).scalars().all()

        totals = {name: sum(getattr(r, attr) for r in reports) for name, attr in METRICS}
        completed = sum(1 for o in outcomes if o == MeetingOutcome.COMPLETED)

        metrics.append({
            "userId": u.id,
            "name": u.name,
            "email": u.email,
            "dailyReportCount": daily_count,
            "meetingReportCount": meeting_count,
            "totalTickets": totals["Tickets"],
            "totalChats": totals["Chats"],
            "totalEmails": totals["Emails"],
            "totalCalls": totals["Calls"],
            "totalGithubIssues": totals["GithubIssues"],
            "averageTicketsPerDay": round2(safe_rate(totals["Tickets"], len(reports))),
            "meetingCompletionRate": round2(safe_rate(completed, len(outcomes)) * 100),
            "totalActivities": sum(totals.values()),
        })

    metrics.sort(key=lambda m: m["totalActivities"], reverse=True)
    return metrics


# ---------------------------------------------------
# /api/analytics/webhook-analytics  (admin)
# ---------------------------------------------------

def webhook_analytics(db: Session, user: SessionUser) -> dict:
    scope = owner_clause(user, IncomingWebhook.created_by)

    total = _count(db, IncomingWebhook, scope)
    by_status = {
        status: _count(db, IncomingWebhook, scope, IncomingWebhook.status == status)
        for status in WebhookStatus
    }

    total_payloads = int(db.execute(
        select(func.count(PayloadLog.id))
        .join(IncomingWebhook, PayloadLog.incoming_webhook_id == IncomingWebhook.id)
        .where(scope)
    ).scalar() or 0)

    def deliveries(status: DeliveryStatus) -> int:
        return int(db.execute(
            select(func.count(DeliveryLog.id))
            .join(OutgoingEndpoint, DeliveryLog.endpoint_id == OutgoingEndpoint.id)
            .join(IncomingWebhook, OutgoingEndpoint.incoming_webhook_id == IncomingWebhook.id)
            .where(scope, DeliveryLog.status == status)
        ).scalar() or 0)

    successful = deliveries(DeliveryStatus.SUCCESS)
    failed = deliveries(DeliveryStatus.FAILED)
    total_deliveries = successful + failed

    newest = db.execute(
        select(IncomingWebhook)
        .where(scope)
        .order_by(IncomingWebhook.created_at.desc())
        .limit(10)
    ).scalars().all()
    ids = [w.id for w in newest]

    payload_counts, endpoint_counts = {}, {}
    if ids:
        payload_counts = dict(db.execute(
            select(PayloadLog.incoming_webhook_id, func.count(PayloadLog.id))
            .where(PayloadLog.incoming_webhook_id.in_(ids))
            .group_by(PayloadLog.incoming_webhook_id)
        ).all())
        endpoint_counts = dict(db.execute(
            select(OutgoingEndpoint.incoming_webhook_id, func.count(OutgoingEndpoint.id))
            .where(OutgoingEndpoint.incoming_webhook_id.in_(ids))
            .group_by(OutgoingEndpoint.incoming_webhook_id)
        ).all())

    return {
        "totalWebhooks": total,
        "activeWebhooks": by_status[WebhookStatus.ACTIVE],
        "inactiveWebhooks": by_status[WebhookStatus.INACTIVE],
        "pausedWebhooks": by_status[WebhookStatus.PAUSED],
        "totalPayloadLogs": total_payloads,
        "successfulDeliveries": successful,
        "failedDeliveries": failed,
        "totalDeliveries": total_deliveries,
        "successRate": round2(safe_rate(successful, total_deliveries) * 100),
        "webhookStats": [
            {
                "webhookId": w.id,
                "name": w.name,
                "status": w.status.value,
                "totalPayloadLogs": int(payload_counts.get(w.id, 0)),
                "totalEndpoints": int(endpoint_counts.get(w.id, 0)),
            }
            for w in newest
        ],
    }
