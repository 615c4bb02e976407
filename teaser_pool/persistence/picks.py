"""Pick book: wholesale replacement before the lock, read-only after."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db import db_models
from ..exceptions import InvalidPickError, PicksLockedError
from ..logging import logger
from ..models import PickSubmission
from ..normalization import normalize
from ..utils.datetime_utils import ensure_utc, now_utc
from .games import query_games


def are_picks_locked(week: db_models.PoolWeek, now: datetime | None = None) -> bool:
    """Picks lock on the admin flag or once the deadline has passed."""
    if week.picks_locked:
        return True
    if week.pick_deadline is None:
        return False
    return ensure_utc(now or now_utc()) >= ensure_utc(week.pick_deadline)


def list_week_picks(session: Session, week_id: int) -> list[db_models.PoolPick]:
    stmt = (
        select(db_models.PoolPick)
        .where(db_models.PoolPick.week_id == week_id)
        .order_by(db_models.PoolPick.participant_id.asc(), db_models.PoolPick.pick_slot.asc())
    )
    return list(session.execute(stmt).scalars().all())


def replace_picks(
    session: Session,
    *,
    participant_id: int,
    week: db_models.PoolWeek,
    submissions: Sequence[PickSubmission],
    now: datetime | None = None,
) -> list[db_models.PoolPick]:
    """Replace all of a participant's picks for `week`.

    Raises:
        PicksLockedError: the deadline passed or an admin locked the week.
        InvalidPickError: a slot is out of range or repeated, a team is
            picked twice, or a team is not playing in this week.
    """
    if are_picks_locked(week, now):
        raise PicksLockedError(f"picks for week {week.id} are locked")

    if len(submissions) > week.pick_count:
        raise InvalidPickError(f"at most {week.pick_count} picks allowed, got {len(submissions)}")

    sides: set[str] = set()
    for game in query_games(session, week.season_segment, week.week_number):
        sides.add(game.home_team)
        sides.add(game.away_team)

    slots: set[int] = set()
    teams: set[str] = set()
    normalized: list[tuple[int, str]] = []
    for submission in submissions:
        if submission.pick_slot > week.pick_count:
            raise InvalidPickError(f"pick_slot {submission.pick_slot} exceeds {week.pick_count}")
        if submission.pick_slot in slots:
            raise InvalidPickError(f"pick_slot {submission.pick_slot} submitted twice")
        team = normalize(submission.picked_team)
        if team not in sides:
            raise InvalidPickError(f"{submission.picked_team} is not playing in this week")
        if team in teams:
            raise InvalidPickError(f"{team} picked more than once")
        slots.add(submission.pick_slot)
        teams.add(team)
        normalized.append((submission.pick_slot, team))

    session.execute(
        delete(db_models.PoolPick)
        .where(db_models.PoolPick.participant_id == participant_id)
        .where(db_models.PoolPick.week_id == week.id)
        .execution_options(synchronize_session="fetch")
    )
    picks = [
        db_models.PoolPick(
            participant_id=participant_id,
            week_id=week.id,
            pick_slot=slot,
            picked_team=team,
        )
        for slot, team in sorted(normalized)
    ]
    session.add_all(picks)
    session.flush()

    logger.info(
        "picks_replaced",
        participant_id=participant_id,
        week_id=week.id,
        teams=[team for _, team in sorted(normalized)],
    )
    return picks
