"""Sync passes driven by the Celery beat tasks.

Full pass: re-derive the current week from the season calendar, reload
every week of the active segment, then refresh odds for the current week
only. Live pass: while anything is on the field, refresh status and scores
for tracked weeks without touching odds.

Both passes catch everything at the boundary and return a SyncSummary;
a failed tick never stops the next one.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import asdict, dataclass
from datetime import date
from typing import Callable

from sqlalchemy.orm import Session

from ..db import get_session
from ..exceptions import TransientFetchError
from ..logging import logger
from ..persistence.games import tracked_weeks
from ..persistence.weeks import get_current_week, set_current_week
from ..utils.datetime_utils import today_utc
from .active_games import LiveGameDetector
from .calendar import external_week_index, resolve_week, segment_week_numbers
from .odds_matching import OddsMatcher
from .schedule_ingestion import ScheduleIngestor


@dataclass(frozen=True)
class SyncSummary:
    kind: str
    updated: int = 0
    errors: int = 0
    inserted: int = 0
    games_seen: int = 0
    odds_updated: int = 0
    odds_unmatched: int = 0
    season_segment: str | None = None
    week_number: int | None = None
    week_changed: bool = False
    skipped_reason: str | None = None
    failed: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def run_full_sync_pass(
    *,
    today: date | None = None,
    ingestor: ScheduleIngestor | None = None,
    matcher: OddsMatcher | None = None,
    session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
) -> SyncSummary:
    try:
        key = resolve_week(today or today_utc())
        segment, week_number = key.season_segment, key.week_number

        with session_factory() as session:
            current = get_current_week(session)
            week_changed = current is None or (
                current.season_segment, current.week_number
            ) != (segment, week_number)
            if week_changed:
                set_current_week(session, segment, week_number)

        ingestor = ingestor or ScheduleIngestor(session_factory=session_factory)
        indices = [external_week_index(segment, n) for n in segment_week_numbers(segment)]
        ingestion = ingestor.load_weeks(segment, indices)

        errors = ingestion.errors
        odds_updated = odds_unmatched = 0
        matcher = matcher or OddsMatcher(session_factory=session_factory)
        try:
            odds = matcher.sync_week_odds(segment, week_number)
        except TransientFetchError as exc:
            errors += 1
            logger.warning("full_sync_odds_fetch_failed", status=exc.status_code, error=str(exc))
        else:
            errors += odds.errors
            odds_updated = odds.updated
            odds_unmatched = odds.unmatched
    except Exception as exc:
        logger.exception("full_sync_failed", error=str(exc))
        return SyncSummary(kind="full", errors=1, failed=True, error=str(exc))

    summary = SyncSummary(
        kind="full",
        updated=ingestion.updated + odds_updated,
        errors=errors,
        inserted=ingestion.inserted,
        games_seen=ingestion.count,
        odds_updated=odds_updated,
        odds_unmatched=odds_unmatched,
        season_segment=segment,
        week_number=week_number,
        week_changed=week_changed,
    )
    logger.info("full_sync_complete", **summary.to_dict())
    return summary


def run_live_sync_pass(
    *,
    today: date | None = None,
    ingestor: ScheduleIngestor | None = None,
    detector: LiveGameDetector | None = None,
    session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
) -> SyncSummary:
    detector = detector or LiveGameDetector()
    try:
        with session_factory() as session:
            if not detector.has_live_games(session):
                logger.debug("live_sync_no_live_games")
                return SyncSummary(kind="live", skipped_reason="no_live_games")

            current = get_current_week(session)
            if current is not None:
                segment = current.season_segment
            else:
                segment = resolve_week(today or today_utc()).season_segment
            weeks = tracked_weeks(session, segment)
            live_count = detector.live_game_count(session)

        logger.info("live_sync_start", segment=segment, weeks=weeks, live_games=live_count)
        ingestor = ingestor or ScheduleIngestor(session_factory=session_factory)
        indices = [external_week_index(segment, n) for n in weeks]
        ingestion = ingestor.load_weeks(segment, indices, scores_only=True)
    except Exception as exc:
        logger.exception("live_sync_failed", error=str(exc))
        return SyncSummary(kind="live", errors=1, failed=True, error=str(exc))

    summary = SyncSummary(
        kind="live",
        updated=ingestion.updated,
        errors=ingestion.errors,
        inserted=ingestion.inserted,
        games_seen=ingestion.count,
        season_segment=segment,
    )
    logger.info("live_sync_complete", **summary.to_dict())
    return summary
