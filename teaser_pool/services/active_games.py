"""LiveGameDetector: is anything on the field right now?

Used only as a scheduling signal for the live score pass. Status is
compared lower-cased so rows written by older tooling ("LIVE",
"In_Progress") still count.
"""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from ..db import db_models
from ..logging import logger

LIVE_STATUS_VALUES = frozenset({
    db_models.GameStatus.in_progress.value,
    "live",
    db_models.GameStatus.halftime.value,
    db_models.GameStatus.overtime.value,
})


class LiveGameDetector:
    """Answers whether any stored game is currently being played."""

    def __init__(self, statuses: frozenset[str] = LIVE_STATUS_VALUES) -> None:
        self.statuses = frozenset(status.lower() for status in statuses)

    def has_live_games(self, session: Session) -> bool:
        stmt = select(
            exists().where(func.lower(db_models.PoolGame.status).in_(sorted(self.statuses)))
        )
        live = bool(session.execute(stmt).scalar())
        logger.debug("live_games_checked", live=live)
        return live

    def live_game_count(self, session: Session) -> int:
        stmt = (
            select(func.count(db_models.PoolGame.id))
            .where(func.lower(db_models.PoolGame.status).in_(sorted(self.statuses)))
        )
        return int(session.execute(stmt).scalar() or 0)


def has_live_games(session: Session) -> bool:
    return LiveGameDetector().has_live_games(session)
