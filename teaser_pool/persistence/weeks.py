"""Week persistence helpers and the current-week transition."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..db import db_models
from ..exceptions import PersistenceError
from ..logging import logger

_POSTSEASON_NAMES = {
    1: "Wild Card",
    2: "Divisional Round",
    3: "Conference Championships",
    4: "Pro Bowl",
    5: "Super Bowl",
}


def default_week_name(segment: str, week_number: int) -> str:
    if segment == db_models.SeasonSegment.postseason.value:
        return _POSTSEASON_NAMES.get(week_number, f"Postseason Week {week_number}")
    if segment == db_models.SeasonSegment.preseason.value:
        if week_number == 0:
            return "Hall of Fame Week"
        return f"Preseason Week {week_number}"
    return f"Week {week_number}"


def get_week(session: Session, segment: str, week_number: int) -> db_models.PoolWeek | None:
    stmt = (
        select(db_models.PoolWeek)
        .where(db_models.PoolWeek.season_segment == segment)
        .where(db_models.PoolWeek.week_number == week_number)
    )
    return session.execute(stmt).scalar_one_or_none()


def get_current_week(session: Session) -> db_models.PoolWeek | None:
    stmt = (
        select(db_models.PoolWeek)
        .where(db_models.PoolWeek.is_current.is_(True))
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).scalar_one_or_none()


def create_week(
    session: Session,
    segment: str,
    week_number: int,
    *,
    year: int | None = None,
    week_name: str | None = None,
    pick_deadline: datetime | None = None,
) -> db_models.PoolWeek:
    """Create a non-current week with the pool's fixed pick count and tease."""
    pool = settings.pool_config
    week = db_models.PoolWeek(
        season_segment=segment,
        week_number=week_number,
        year=year or pool.season_year,
        week_name=week_name or default_week_name(segment, week_number),
        is_current=False,
        pick_deadline=pick_deadline,
        picks_locked=False,
        pick_count=pool.pick_count,
        tease_points=pool.tease_points,
    )
    session.add(week)
    session.flush()
    logger.info("week_created", segment=segment, week_number=week_number, week_id=week.id)
    return week


def set_current_week(session: Session, segment: str, week_number: int) -> db_models.PoolWeek:
    """Make (segment, week_number) the single current week.

    Clears every is_current flag, then sets the target (creating it when
    absent), inside one savepoint: readers never observe zero or two
    current weeks once the transaction commits.
    """
    try:
        with session.begin_nested():
            previous = get_current_week(session)
            session.execute(
                update(db_models.PoolWeek)
                .where(db_models.PoolWeek.is_current.is_(True))
                .values(is_current=False)
                .execution_options(synchronize_session="fetch")
            )
            session.flush()
            target = get_week(session, segment, week_number)
            if target is None:
                target = create_week(session, segment, week_number)
            target.is_current = True
            session.flush()
    except SQLAlchemyError as exc:
        raise PersistenceError(
            f"current week transition to {segment}/{week_number} failed: {exc}"
        ) from exc

    logger.info(
        "current_week_set",
        segment=segment,
        week_number=week_number,
        week_id=target.id,
        previous_week_id=previous.id if previous else None,
    )
    return target


def ensure_current_week(session: Session, segment: str, week_number: int) -> db_models.PoolWeek:
    """Return the current week, creating and selecting (segment, week_number) if none is set."""
    current = get_current_week(session)
    if current is not None:
        return current
    logger.info("current_week_missing", segment=segment, week_number=week_number)
    return set_current_week(session, segment, week_number)
