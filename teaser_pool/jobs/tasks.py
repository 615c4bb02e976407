"""Celery tasks for pool sync.

This module re-exports all tasks for Celery discovery.
"""

from __future__ import annotations

from .sync_tasks import run_full_sync, run_live_sync

__all__ = [
    "run_full_sync",
    "run_live_sync",
]
