"""Shared Redis distributed lock helpers."""
from __future__ import annotations

import redis
from redis.exceptions import LockNotOwnedError
from redis.lock import Lock

from ..config import settings
from ..logging import logger

# Default TTL; task locks take theirs from SyncConfig
LOCK_TIMEOUT_5MIN = 300

# Locks held by this process; each carries the owner token release checks against
_held_locks: dict[str, Lock] = {}


def _client() -> redis.Redis:
    return redis.from_url(settings.redis_url)


def acquire_redis_lock(lock_name: str, timeout: int = LOCK_TIMEOUT_5MIN) -> bool:
    """Try to acquire a Redis lock. Returns True if acquired."""
    lock = _client().lock(lock_name, timeout=timeout, blocking=False, thread_local=False)
    try:
        acquired = bool(lock.acquire())
    except redis.RedisError as exc:
        # Beat and broker share this Redis; if it is unreachable no second tick can arrive
        logger.warning("redis_lock_failed", lock=lock_name, error=str(exc))
        return True
    if acquired:
        _held_locks[lock_name] = lock
    return acquired


def release_redis_lock(lock_name: str) -> None:
    """Release a Redis lock if this process still owns it.

    The token compare and delete run as one server-side script, so a lock
    that expired and was taken by another worker is left alone.
    """
    lock = _held_locks.pop(lock_name, None)
    if lock is None:
        return
    try:
        lock.release()
    except LockNotOwnedError:
        logger.warning("redis_lock_expired_before_release", lock=lock_name)
    except redis.RedisError as exc:
        logger.warning("redis_unlock_failed", lock=lock_name, error=str(exc))
