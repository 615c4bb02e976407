"""Fail-fast environment checks for the sync worker and beat scheduler."""

from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import urlparse

ALLOWED_ENVIRONMENTS = {"development", "staging", "production"}

# Secrets each production role needs beyond the database and Redis
ROLE_SECRETS: dict[str, tuple[str, ...]] = {
    "worker": ("ODDS_API_KEY",),
    "beat": (),
}


def _require(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise RuntimeError(f"{name} is required and must be set before startup.")
    return value


def _check_production_url(name: str, value: str) -> None:
    parsed = urlparse(value)
    if not parsed.hostname:
        raise RuntimeError(f"{name} must be a valid URL (missing hostname).")
    if parsed.hostname in {"localhost", "127.0.0.1"}:
        raise RuntimeError(f"{name} must not point to localhost in production.")
    if parsed.username == "postgres" and parsed.password == "postgres":
        raise RuntimeError(f"{name} must not use default postgres credentials in production.")


@lru_cache(maxsize=1)
def validate_env() -> None:
    """Validate required environment variables once per process.

    Every role needs ENVIRONMENT, DATABASE_URL and REDIS_URL. In production
    the URLs must point at real hosts, and SYNC_ROLE (default ``worker``)
    decides which secrets are also required; a worker without ODDS_API_KEY
    would run every odds refresh as a no-op.
    """
    environment = _require("ENVIRONMENT")
    if environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")

    urls = {name: _require(name) for name in ("DATABASE_URL", "REDIS_URL")}
    if environment != "production":
        return

    for name, value in urls.items():
        _check_production_url(name, value)

    role = os.getenv("SYNC_ROLE", "worker")
    if role not in ROLE_SECRETS:
        allowed = ", ".join(sorted(ROLE_SECRETS))
        raise RuntimeError(f"SYNC_ROLE must be one of: {allowed}.")
    for secret in ROLE_SECRETS[role]:
        _require(secret)
