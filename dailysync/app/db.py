# dailysync/app/db.py

import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from dailysync.app.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Prometheus Metrics
# ---------------------------------------------------------
from prometheus_client import Counter, Histogram

DB_QUERY_LATENCY = Histogram(
    "dailysync_db_query_latency_seconds",
    "Latency of DB commit/rollback operations"
)

DB_COMMIT_TOTAL = Counter(
    "dailysync_db_commit_total",
    "Total DB commit operations",
    ["result"]  # ok | failed
)

DB_ROLLBACK_TOTAL = Counter(
    "dailysync_db_rollback_total",
    "Total DB rollback operations",
    ["result"]  # ok | failed
)


# ---------------------------------------------------------
# DATABASE ENGINE INIT
# ---------------------------------------------------------
def _engine_kwargs(url: str) -> dict:
    kwargs = {"future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # in-memory databases must share one connection across threads
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine, future=True)
Base = declarative_base()


# ---------------------------------------------------------
# DB INIT FUNCTION
# ---------------------------------------------------------
def init_db():
    """
    Create DB tables from models. Call at startup.
    """
    # models must be imported so they register on Base.metadata
    from dailysync.app import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Error initializing DB")
        raise


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: one session per request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------------------------------------------------
# SAFE HELPERS FOR COMMIT & ROLLBACK
# ---------------------------------------------------------
def safe_commit(db: Session):
    """
    Commit with metrics instrumentation. Rolls back on failure.
    """
    with DB_QUERY_LATENCY.time():
        try:
            db.commit()
            DB_COMMIT_TOTAL.labels(result="ok").inc()
        except Exception:
            DB_COMMIT_TOTAL.labels(result="failed").inc()
            safe_rollback(db)
            raise


def safe_rollback(db: Session):
    """
    Rollback with instrumentation.
    """
    with DB_QUERY_LATENCY.time():
        try:
            db.rollback()
            DB_ROLLBACK_TOTAL.labels(result="ok").inc()
        except Exception:
            DB_ROLLBACK_TOTAL.labels(result="failed").inc()
            raise
