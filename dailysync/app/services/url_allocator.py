# dailysync/app/services/url_allocator.py
"""
Random, collision-checked addresses for incoming webhooks.

    generate candidate -> check existing rows -> bounded retry -> fail closed

There is no lock between the existence check and the insert; the unique
index on ``incoming_webhooks.url`` is the last line of defence.
"""

import logging
import random
import string
from typing import Callable, Optional, TypeVar

from prometheus_client import Counter

from dailysync.app.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEBHOOK_URL_PREFIX = "/webhook/"
WEBHOOK_SLUG_LENGTH = 32
WEBHOOK_SLUG_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits

URL_ALLOCATION_ATTEMPTS = Counter(
    "dailysync_webhook_url_allocation_attempts_total",
    "Candidate webhook URLs generated",
    ["result"]  # unique | collision
)

URL_ALLOCATION_EXHAUSTED = Counter(
    "dailysync_webhook_url_allocation_exhausted_total",
    "Webhook URL allocations that ran out of attempts"
)

_rng = random.Random()


class AllocationExhausted(Exception):
    def __init__(self, attempts: int):
        super().__init__(f"no unique candidate after {attempts} attempts")
        self.attempts = attempts


def generate_webhook_url(rng: Optional[random.Random] = None) -> str:
    rng = rng or _rng
    slug = "".join(rng.choice(WEBHOOK_SLUG_ALPHABET) for _ in range(WEBHOOK_SLUG_LENGTH))
    return f"{WEBHOOK_URL_PREFIX}{slug}"


def allocate_unique(
    generate: Callable[[], T],
    exists: Callable[[T], bool],
    max_attempts: Optional[int] = None,
) -> T:
    """
    Return the first generated candidate for which ``exists`` is False.
    Raises AllocationExhausted after ``max_attempts`` collisions.
    """
    max_attempts = max_attempts or settings.WEBHOOK_URL_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        candidate = generate()
        if not exists(candidate):
            URL_ALLOCATION_ATTEMPTS.labels(result="unique").inc()
            return candidate
        URL_ALLOCATION_ATTEMPTS.labels(result="collision").inc()
        logger.warning("Allocation collision (attempt %s/%s)", attempt, max_attempts)

    URL_ALLOCATION_EXHAUSTED.inc()
    raise AllocationExhausted(max_attempts)
