"""Game persistence helpers (the GameStore merge/query layer)."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import db_models
from ..exceptions import PersistenceError
from ..logging import logger
from ..models import GameUpdate
from ..utils.datetime_utils import now_utc

MergeOutcome = Literal["inserted", "updated", "unchanged"]

_STATUS_ALIASES: dict[str, str] = {
    "scheduled": db_models.GameStatus.scheduled.value,
    "pre": db_models.GameStatus.scheduled.value,
    "in_progress": db_models.GameStatus.in_progress.value,
    "in": db_models.GameStatus.in_progress.value,
    "live": db_models.GameStatus.in_progress.value,
    "end_period": db_models.GameStatus.in_progress.value,
    "halftime": db_models.GameStatus.halftime.value,
    "overtime": db_models.GameStatus.overtime.value,
    "final": db_models.GameStatus.final.value,
    "final_overtime": db_models.GameStatus.final.value,
    "post": db_models.GameStatus.final.value,
    "completed": db_models.GameStatus.final.value,
    "postponed": db_models.GameStatus.postponed.value,
    "suspended": db_models.GameStatus.postponed.value,
}


def normalize_status(status: str | None) -> str:
    """Map a feed status descriptor (e.g. STATUS_IN_PROGRESS) onto GameStatus."""
    if not status:
        return db_models.GameStatus.scheduled.value
    status_normalized = status.strip().lower()
    if status_normalized.startswith("status_"):
        status_normalized = status_normalized[len("status_"):]
    return _STATUS_ALIASES.get(status_normalized, db_models.GameStatus.other.value)


def _insert_for(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite_insert
    return pg_insert


def merge_game(
    session: Session,
    game: GameUpdate,
    fields: frozenset[str] | None = None,
) -> MergeOutcome:
    """Idempotent upsert keyed by external_id.

    Inserts with every supplied value. On conflict only the supplied fields
    (narrowed to `fields` when given) are written, and only when at least
    one of them differs from the stored row, so replaying an unchanged
    event is a no-op.

    Raises:
        PersistenceError: the write failed; the surrounding transaction is intact.
    """
    game_table = db_models.PoolGame
    insert_values = game.merge_values()
    if insert_values.get("status") is None:
        insert_values.pop("status", None)
    conflict_values = {
        key: value for key, value in game.merge_values(fields).items()
        if not (key == "status" and value is None)
    }
    now = now_utc()

    insert = _insert_for(session)
    base_stmt = insert(game_table).values(
        external_id=game.external_id,
        last_ingested_at=now,
        **insert_values,
    )
    excluded = base_stmt.excluded

    try:
        with session.begin_nested():
            existing_id = session.execute(
                select(game_table.id).where(game_table.external_id == game.external_id)
            ).scalar()

            if conflict_values:
                changed = or_(*[
                    getattr(game_table, key).is_distinct_from(getattr(excluded, key))
                    for key in conflict_values
                ])
                set_ = {key: getattr(excluded, key) for key in conflict_values}
                set_["updated_at"] = now
                set_["last_ingested_at"] = now
                stmt = base_stmt.on_conflict_do_update(
                    index_elements=[game_table.external_id],
                    set_=set_,
                    where=changed,
                )
            else:
                stmt = base_stmt.on_conflict_do_nothing(index_elements=[game_table.external_id])

            written = session.execute(stmt.returning(game_table.id)).first()
    except SQLAlchemyError as exc:
        raise PersistenceError(f"merge failed for game {game.external_id}: {exc}") from exc

    if existing_id is None:
        outcome: MergeOutcome = "inserted"
    elif written is not None:
        outcome = "updated"
    else:
        outcome = "unchanged"

    logger.debug(
        "game_merged",
        external_id=game.external_id,
        outcome=outcome,
        fields=sorted(conflict_values),
    )
    return outcome


def get_game_by_external_id(session: Session, external_id: str) -> db_models.PoolGame | None:
    stmt = (
        select(db_models.PoolGame)
        .where(db_models.PoolGame.external_id == external_id)
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).scalar_one_or_none()


def query_games(
    session: Session,
    segment: str,
    week_number: int,
    status: str | None = None,
) -> list[db_models.PoolGame]:
    """Games for one (segment, week), in kickoff order."""
    stmt = (
        select(db_models.PoolGame)
        .where(db_models.PoolGame.season_segment == segment)
        .where(db_models.PoolGame.week_number == week_number)
        .order_by(db_models.PoolGame.game_date.asc(), db_models.PoolGame.id.asc())
        .execution_options(populate_existing=True)
    )
    if status is not None:
        stmt = stmt.where(db_models.PoolGame.status == status.lower())
    return list(session.execute(stmt).scalars().all())


def tracked_weeks(session: Session, segment: str) -> list[int]:
    """Week numbers in `segment` that have at least one stored game."""
    stmt = (
        select(db_models.PoolGame.week_number)
        .where(db_models.PoolGame.season_segment == segment)
        .distinct()
        .order_by(db_models.PoolGame.week_number.asc())
    )
    return list(session.execute(stmt).scalars().all())


def find_games_in_window(
    session: Session,
    *,
    segment: str,
    week_number: int,
    home_team: str,
    away_team: str,
    window_start: datetime,
    window_end: datetime,
) -> list[db_models.PoolGame]:
    """Games matching the team pair with game_date in [window_start, window_end), lowest id first.

    Raises:
        PersistenceError: the lookup failed; the surrounding transaction is intact.
    """
    stmt = (
        select(db_models.PoolGame)
        .where(db_models.PoolGame.season_segment == segment)
        .where(db_models.PoolGame.week_number == week_number)
        .where(db_models.PoolGame.home_team == home_team)
        .where(db_models.PoolGame.away_team == away_team)
        .where(db_models.PoolGame.game_date >= window_start)
        .where(db_models.PoolGame.game_date < window_end)
        .order_by(db_models.PoolGame.id.asc())
        .execution_options(populate_existing=True)
    )
    try:
        with session.begin_nested():
            return list(session.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        raise PersistenceError(f"game lookup failed for {away_team}@{home_team}: {exc}") from exc


def update_spread(session: Session, game_id: int, spread: float | None) -> bool:
    """Write the spread column only. Returns True when the stored value changed."""
    stmt = (
        update(db_models.PoolGame)
        .where(db_models.PoolGame.id == game_id)
        .where(db_models.PoolGame.spread.is_distinct_from(spread))
        .values(spread=spread, updated_at=now_utc())
        .execution_options(synchronize_session=False)
    )
    try:
        with session.begin_nested():
            result = session.execute(stmt)
    except SQLAlchemyError as exc:
        raise PersistenceError(f"spread update failed for game {game_id}: {exc}") from exc
    return result.rowcount > 0
