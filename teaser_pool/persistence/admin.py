"""Administrative persistence operations.

Game resets, pick deadline management and week advancement.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..db import db_models
from ..logging import logger
from ..services.calendar import next_week_key
from ..utils.datetime_utils import ensure_utc
from .weeks import get_current_week, set_current_week

# Deadlines are entered in Pacific time (e.g. "2025-08-25 10:00" for 10am PT Sunday)
DEADLINE_INPUT_TZ = ZoneInfo("America/Los_Angeles")
DEADLINE_INPUT_FORMAT = "%Y-%m-%d %H:%M"


def reset_games(
    session: Session,
    segment: str | None = None,
    week_number: int | None = None,
) -> dict:
    """Delete stored games, optionally scoped to a segment and week.

    This is the only path that removes games; syncs never delete.
    """
    stmt = delete(db_models.PoolGame)
    if segment is not None:
        stmt = stmt.where(db_models.PoolGame.season_segment == segment)
    if week_number is not None:
        stmt = stmt.where(db_models.PoolGame.week_number == week_number)
    result = session.execute(stmt.execution_options(synchronize_session="fetch"))
    session.flush()
    logger.warning(
        "games_reset",
        segment=segment,
        week_number=week_number,
        deleted=result.rowcount,
    )
    return {"segment": segment, "week_number": week_number, "deleted": result.rowcount}


def parse_deadline(text: str, tz: ZoneInfo = DEADLINE_INPUT_TZ) -> datetime:
    """Parse an admin-entered deadline into an aware UTC datetime.

    Raises:
        ValueError: the text does not match YYYY-MM-DD HH:MM.
    """
    local = datetime.strptime(text.strip(), DEADLINE_INPUT_FORMAT).replace(tzinfo=tz)
    return ensure_utc(local)


def set_pick_deadline(session: Session, week: db_models.PoolWeek, deadline: datetime) -> db_models.PoolWeek:
    week.pick_deadline = ensure_utc(deadline)
    session.flush()
    logger.info("pick_deadline_set", week_id=week.id, deadline=week.pick_deadline.isoformat())
    return week


def clear_pick_deadline(session: Session, week: db_models.PoolWeek) -> db_models.PoolWeek:
    week.pick_deadline = None
    session.flush()
    logger.info("pick_deadline_cleared", week_id=week.id)
    return week


def set_picks_locked(session: Session, week: db_models.PoolWeek, locked: bool = True) -> db_models.PoolWeek:
    week.picks_locked = locked
    session.flush()
    logger.info("picks_lock_changed", week_id=week.id, locked=locked)
    return week


def advance_week(session: Session) -> db_models.PoolWeek | None:
    """Move the current week to the next calendar week.

    Returns None when there is no current week or the season is over.
    """
    current = get_current_week(session)
    if current is None:
        logger.warning("advance_week_no_current_week")
        return None
    following = next_week_key(current.season_segment, current.week_number)
    if following is None:
        logger.warning(
            "advance_week_season_complete",
            segment=current.season_segment,
            week_number=current.week_number,
        )
        return None
    return set_current_week(session, following.season_segment, following.week_number)
