"""
Applications Background Jobs

Scheduled maintenance for the submission pipeline:
1. Evict expired rate limit windows from the in-memory limiter store

The Redis limiter store expires its own keys, so the sweep only does
work when the memory store is active. The job is idempotent.
"""

import logging
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from recruit.core.rate_limit import MemoryRateLimitStore, get_rate_limiter
from recruit.core.scheduler import register_job

logger = logging.getLogger(__name__)

# Job IDs for registration and manual triggering
JOB_ID_RATE_LIMIT_SWEEP = "rate_limit_sweep"

SWEEP_INTERVAL_MINUTES = 5


async def sweep_rate_limit_windows() -> dict[str, Any]:
    """
    Remove rate limit windows that have closed.

    Returns:
        Summary with the number of evicted keys and the keys remaining
    """
    try:
        limiter = get_rate_limiter()
    except RuntimeError:
        logger.debug("Rate limiter not initialized, skipping sweep")
        return {"evicted": 0, "remaining": 0, "skipped": True}

    store = limiter.store
    if not isinstance(store, MemoryRateLimitStore):
        return {"evicted": 0, "remaining": 0, "skipped": True}

    evicted = await store.sweep()
    remaining = len(store)
    if evicted:
        logger.info(f"Rate limit sweep evicted {evicted} windows ({remaining} remaining)")
    return {"evicted": evicted, "remaining": remaining, "skipped": False}


def register_application_jobs() -> None:
    """Register application background jobs with the scheduler."""
    register_job(
        job_id=JOB_ID_RATE_LIMIT_SWEEP,
        func=sweep_rate_limit_windows,
        trigger=IntervalTrigger(minutes=SWEEP_INTERVAL_MINUTES),
    )
    logger.info(f"Registered application jobs: {JOB_ID_RATE_LIMIT_SWEEP}")
