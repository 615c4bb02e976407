"""Periodic sync tasks.

Each task holds its own Redis lock for the length of a pass, so a beat tick
that fires while the previous run is still in flight is skipped. The full
and live tasks use different locks and may overlap each other.
"""

from __future__ import annotations

from celery import shared_task

from ..config import settings
from ..logging import logger
from ..utils.redis_lock import acquire_redis_lock, release_redis_lock

FULL_SYNC_LOCK = "lock:teaser_pool:full_sync"
LIVE_SYNC_LOCK = "lock:teaser_pool:live_sync"


@shared_task(name="run_full_sync")
def run_full_sync() -> dict:
    """Calendar check, schedule reload for the active segment, odds for the current week."""
    from ..services.sync import run_full_sync_pass

    if not acquire_redis_lock(FULL_SYNC_LOCK, timeout=settings.sync_config.full_sync_lock_seconds):
        logger.debug("run_full_sync_skipped_locked")
        return {"skipped": True, "reason": "locked"}

    try:
        return run_full_sync_pass().to_dict()
    finally:
        release_redis_lock(FULL_SYNC_LOCK)


@shared_task(name="run_live_sync")
def run_live_sync() -> dict:
    """Score/status refresh for tracked weeks, only while a game is live."""
    from ..services.sync import run_live_sync_pass

    if not acquire_redis_lock(LIVE_SYNC_LOCK, timeout=settings.sync_config.live_sync_lock_seconds):
        logger.debug("run_live_sync_skipped_locked")
        return {"skipped": True, "reason": "locked"}

    try:
        return run_live_sync_pass().to_dict()
    finally:
        release_redis_lock(LIVE_SYNC_LOCK)
