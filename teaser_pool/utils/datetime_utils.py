"""
Low-level timezone and timestamp utilities.

Domain-agnostic: season and week boundaries live in services/calendar.py.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Return the current date in UTC timezone."""
    return now_utc().date()


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse feed timestamps like 2025-09-07T17:00Z into aware UTC datetimes."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Half-open [start, start + 24h) window for the UTC calendar day of `moment`."""
    start = datetime.combine(ensure_utc(moment).date(), datetime.min.time(), tzinfo=timezone.utc)
    return start, start + timedelta(hours=24)
