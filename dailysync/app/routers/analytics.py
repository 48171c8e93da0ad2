# dailysync/app/routers/analytics.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dailysync.app.db import get_db
from dailysync.app.services import analytics
from dailysync.app.services.auth_service import SessionUser, get_current_admin, get_session_user
from dailysync.app.utils.responses import success

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("/daily-reports")
def daily_reports(
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    """
    30-day totals/averages plus a 7-day per-report breakdown.
    """
    return success(analytics.daily_reports_summary(db, user))


@router.get("/dashboard")
def dashboard(
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    return success(analytics.dashboard_summary(db, user))


@router.get("/user-performance")
def user_performance(
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return success(analytics.user_performance(db))


@router.get("/webhook-analytics")
def webhook_analytics(
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return success(analytics.webhook_analytics(db, admin))
