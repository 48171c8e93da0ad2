# dailysync/app/routers/reports.py

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from dailysync.app.db import get_db
from dailysync.app.models import DailyReport, MeetingReport
from dailysync.app.repositories.report_repository import DailyReportRepository, MeetingReportRepository
from dailysync.app.schemas.report import (
    DailyReportCreate,
    DailyReportOut,
    MeetingReportCreate,
    MeetingReportOut,
)
from dailysync.app.services.access import owner_clause
from dailysync.app.services.auth_service import SessionUser, get_session_user
from dailysync.app.services.webhook_service import ensure_user
from dailysync.app.utils.responses import build_pagination, page_params, success, validate_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])


# ---------------------------------------
# Daily reports
# ---------------------------------------
@router.get("/daily-reports")
def list_daily_reports(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    page, limit, offset = page_params(page, limit)
    rows, total = DailyReportRepository(db).list_scoped(owner_clause(user, DailyReport.user_id), offset, limit)
    return success(
        [DailyReportOut.model_validate(r).dump() for r in rows],
        pagination=build_pagination(page, limit, total),
    )


@router.post("/daily-reports")
def submit_daily_report(
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    """
    Record the caller's counts for a day (today when ``date`` is omitted).
    """
    data = validate_body(DailyReportCreate, body, "Invalid daily report data")
    owner = ensure_user(db, user)

    values = data.model_dump()
    values["date"] = data.date or datetime.now(timezone.utc).date()
    values["user_id"] = owner.id

    report = DailyReportRepository(db).create(values)
    logger.info("Daily report %s submitted by %s for %s", report.id, owner.id, report.date)
    return success(DailyReportOut.model_validate(report).dump(), message="Daily report submitted successfully", status_code=201)


# ---------------------------------------
# Meeting reports
# ---------------------------------------
@router.get("/meeting-reports")
def list_meeting_reports(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    page, limit, offset = page_params(page, limit)
    rows, total = MeetingReportRepository(db).list_scoped(owner_clause(user, MeetingReport.user_id), offset, limit)
    return success(
        [MeetingReportOut.model_validate(r).dump() for r in rows],
        pagination=build_pagination(page, limit, total),
    )


@router.post("/meeting-reports")
def submit_meeting_report(
    body: dict = Body(...),
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    data = validate_body(MeetingReportCreate, body, "Invalid meeting report data")
    owner = ensure_user(db, user)

    report = MeetingReportRepository(db).create({**data.model_dump(), "user_id": owner.id})
    logger.info("Meeting report %s submitted by %s", report.id, owner.id)
    return success(MeetingReportOut.model_validate(report).dump(), message="Meeting report submitted successfully", status_code=201)
