# dailysync/app/celery_app.py
"""
Celery application factory + shared singleton instance
with Prometheus worker instrumentation.
"""

import time
import logging

from celery import Celery, Task
from kombu import Exchange, Queue
from prometheus_client import Counter, Histogram

from dailysync.app.config import settings

logger = logging.getLogger(__name__)

BROKER_URL = settings.CELERY_BROKER_URL
RESULT_BACKEND = settings.CELERY_RESULT_BACKEND or BROKER_URL


# ---------------------------------------------------------
# PROMETHEUS METRICS
# ---------------------------------------------------------
WORKER_TASK_TOTAL = Counter(
    "dailysync_worker_tasks_total",
    "Worker tasks executed",
    ["task", "status"]
)

WORKER_TASK_LATENCY = Histogram(
    "dailysync_worker_task_latency_seconds",
    "Latency of worker tasks",
    ["task"]
)


class InstrumentedTask(Task):
    """
    Counts started/succeeded/failed runs and observes latency per task.
    """
    def __call__(self, *args, **kwargs):
        task_name = self.name or "unknown"

        WORKER_TASK_TOTAL.labels(task=task_name, status="started").inc()
        start = time.time()

        try:
            result = self.run(*args, **kwargs)
            WORKER_TASK_TOTAL.labels(task=task_name, status="success").inc()
            return result

        except Exception:
            WORKER_TASK_TOTAL.labels(task=task_name, status="failed").inc()
            raise

        finally:
            WORKER_TASK_LATENCY.labels(task=task_name).observe(time.time() - start)


def make_celery_app(app_name: str = "dailysync") -> Celery:
    celery = Celery(
        app_name,
        broker=BROKER_URL,
        backend=RESULT_BACKEND,
        include=["dailysync.app.tasks.delivery_tasks"],
        task_cls=InstrumentedTask,
    )

    celery.conf.update(
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_reject_on_worker_lost=True,

        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],

        timezone="UTC",
        enable_utc=True,

        task_default_queue="default",
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    )

    celery.conf.task_queues = (
        Queue("default", Exchange("default"), routing_key="default"),
        Queue("deliveries", Exchange("deliveries"), routing_key="deliveries"),
    )

    celery.conf.task_routes = {
        "delivery.deliver_payload": {
            "queue": "deliveries",
            "routing_key": "deliveries",
        },
    }

    return celery


celery_app = make_celery_app()
