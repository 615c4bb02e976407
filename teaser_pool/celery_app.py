"""Celery app configuration for the teaser pool sync service."""

from __future__ import annotations

from datetime import timedelta

from celery import Celery, signals

from .config import settings
from .db import init_db
from .logging import logger

DEFAULT_QUEUE = "teaser-pool"

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
    "task_track_started": True,
    "worker_prefetch_multiplier": 1,
    # A pass should never outlive its lock
    "task_time_limit": settings.sync_config.full_sync_lock_seconds,
    "task_soft_time_limit": settings.sync_config.full_sync_lock_seconds - 30,
    "task_default_queue": DEFAULT_QUEUE,
}

app = Celery(
    "teaser-pool-sync",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["teaser_pool.jobs.tasks"],
)
app.conf.update(**celery_config)
app.conf.task_routes = {
    "run_full_sync": {"queue": DEFAULT_QUEUE, "routing_key": DEFAULT_QUEUE},
    "run_live_sync": {"queue": DEFAULT_QUEUE, "routing_key": DEFAULT_QUEUE},
}
# Full sync reloads the schedule and odds; live sync only runs a pass while a game is on.
app.conf.beat_schedule = {
    "full-sync": {
        "task": "run_full_sync",
        "schedule": timedelta(seconds=settings.sync_config.full_sync_interval_seconds),
        "options": {"queue": DEFAULT_QUEUE, "routing_key": DEFAULT_QUEUE},
    },
    "live-sync": {
        "task": "run_live_sync",
        "schedule": timedelta(seconds=settings.sync_config.live_sync_interval_seconds),
        # Stale live ticks are worthless; drop them instead of piling up behind a slow pass
        "options": {
            "queue": DEFAULT_QUEUE,
            "routing_key": DEFAULT_QUEUE,
            "expires": settings.sync_config.live_sync_interval_seconds,
        },
    },
}


@signals.worker_ready.connect
def on_worker_ready(sender=None, **kwargs):
    """Called when the Celery worker is ready. Creates any missing pool tables."""
    worker_name = getattr(sender, "hostname", None) or (str(sender) if sender else "unknown")
    logger.info("celery_worker_ready", worker=worker_name)
    try:
        init_db()
    except Exception as exc:
        logger.exception("init_db_failed", error=str(exc))


@signals.worker_shutting_down.connect
def on_worker_shutting_down(sender=None, **kwargs):
    """Held sync locks are left to expire via their TTL."""
    worker_name = str(sender) if sender else "unknown"
    logger.info("celery_worker_shutting_down", worker=worker_name)
