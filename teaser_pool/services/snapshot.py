"""Pull-based snapshot for the presentation layer.

Current week, its games and live standings, recomputed on every call.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..db import db_models
from ..persistence.games import query_games
from ..persistence.picks import are_picks_locked, list_week_picks
from ..persistence.weeks import get_current_week
from .standings import LiveStandings, TiePolicy, compute_live_standings


@dataclass(frozen=True)
class WeekSnapshot:
    week: db_models.PoolWeek | None
    games: tuple[db_models.PoolGame, ...]
    standings: LiveStandings | None
    picks_locked: bool


def build_week_snapshot(session: Session) -> WeekSnapshot:
    week = get_current_week(session)
    if week is None:
        return WeekSnapshot(week=None, games=(), standings=None, picks_locked=False)

    games = query_games(session, week.season_segment, week.week_number)
    picks = list_week_picks(session, week.id)
    participants = session.execute(
        select(db_models.PoolParticipant).order_by(db_models.PoolParticipant.id.asc())
    ).scalars().all()

    pool = settings.pool_config
    standings = compute_live_standings(
        picks,
        games,
        participants,
        tease_points=week.tease_points,
        tie_policy=TiePolicy(pool.tie_policy),
        payout_unit=pool.payout_unit,
    )
    return WeekSnapshot(
        week=week,
        games=tuple(games),
        standings=standings,
        picks_locked=are_picks_locked(week),
    )
