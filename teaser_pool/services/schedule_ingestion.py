"""Schedule ingestion: feed events → normalized GameUpdates → GameStore.

Home and away sides are always taken from the competitor role tag, never
from their position in the competitors array.
"""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Callable, Iterable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..config import settings
from ..db import STARTED_STATUSES, db_models, get_session
from ..exceptions import MalformedRecordError, PersistenceError, TransientFetchError
from ..live.espn import ESPNScheduleClient
from ..logging import logger
from ..models import LIVE_FIELDS, GameUpdate
from ..normalization import normalize_team_code
from ..persistence.games import merge_game, normalize_status
from ..utils.datetime_utils import parse_iso_datetime
from ..utils.parsing import parse_int
from .calendar import SEGMENT_SEASON_TYPES, internal_week_number

_LIVE_STATUSES = frozenset({
    db_models.GameStatus.in_progress.value,
    db_models.GameStatus.halftime.value,
    db_models.GameStatus.overtime.value,
})
_REGULATION_PERIODS = 4


@dataclass(frozen=True)
class IngestionSummary:
    count: int
    errors: int
    inserted: int = 0
    updated: int = 0

    def __add__(self, other: IngestionSummary) -> IngestionSummary:
        return IngestionSummary(
            count=self.count + other.count,
            errors=self.errors + other.errors,
            inserted=self.inserted + other.inserted,
            updated=self.updated + other.updated,
        )


def _side(competitors: list[dict], role: str, event_id: str) -> dict:
    for competitor in competitors:
        if isinstance(competitor, dict) and competitor.get("homeAway") == role:
            return competitor
    raise MalformedRecordError(f"event {event_id} has no {role} competitor", record_id=event_id)


def _team_identifier(competitor: dict, event_id: str) -> str:
    team = competitor.get("team") or {}
    raw = team.get("abbreviation") or team.get("displayName") or team.get("name")
    if not raw:
        raise MalformedRecordError(f"event {event_id} competitor has no team identifier", record_id=event_id)
    return str(raw)


def parse_event(event: dict, segment: str, week_number: int) -> GameUpdate:
    """Build a GameUpdate from one scoreboard event.

    Scores are only carried once the game has started; a scheduled game's
    "0" scores are not real.

    Raises:
        MalformedRecordError: a required field is missing, inconsistent or
            of the wrong shape.
    """
    if not isinstance(event, dict):
        raise MalformedRecordError("event is not an object")
    try:
        return _parse_event(event, segment, week_number)
    except (AttributeError, TypeError, KeyError, ValueError) as exc:
        event_id = str(event.get("id") or "") or None
        raise MalformedRecordError(f"event {event_id} has an unexpected shape: {exc}", record_id=event_id) from exc


def _parse_event(event: dict, segment: str, week_number: int) -> GameUpdate:
    event_id = str(event.get("id") or "")
    if not event_id:
        raise MalformedRecordError("event has no id")

    competitions = event.get("competitions") or []
    if not competitions or not isinstance(competitions[0], dict):
        raise MalformedRecordError(f"event {event_id} has no competition", record_id=event_id)
    competition = competitions[0]
    competitors = competition.get("competitors") or []

    home = _side(competitors, "home", event_id)
    away = _side(competitors, "away", event_id)

    game_date = parse_iso_datetime(event.get("date") or competition.get("date"))
    if game_date is None:
        raise MalformedRecordError(f"event {event_id} has no kickoff time", record_id=event_id)

    status_block = event.get("status") or competition.get("status") or {}
    raw_status = ((status_block.get("type") or {}).get("name") or "").lower()
    status = normalize_status(raw_status)
    period = parse_int(status_block.get("period"))
    if status == db_models.GameStatus.in_progress.value and period and period > _REGULATION_PERIODS:
        status = db_models.GameStatus.overtime.value

    values: dict = {
        "external_id": event_id,
        "home_team": normalize_team_code(_team_identifier(home, event_id)).code,
        "away_team": normalize_team_code(_team_identifier(away, event_id)).code,
        "game_date": game_date,
        "season_segment": segment,
        "week_number": week_number,
        "status": status,
    }
    if status in STARTED_STATUSES:
        values["home_score"] = parse_int(home.get("score"))
        values["away_score"] = parse_int(away.get("score"))
    if status in _LIVE_STATUSES:
        values["quarter"] = period
        values["clock"] = status_block.get("displayClock")
    else:
        values["quarter"] = None
        values["clock"] = None

    try:
        return GameUpdate(**values)
    except ValidationError as exc:
        raise MalformedRecordError(f"event {event_id} invalid: {exc}", record_id=event_id) from exc


class ScheduleIngestor:
    """Fetches schedule events per (segment, week) and merges them into GameStore."""

    def __init__(
        self,
        client: ESPNScheduleClient | None = None,
        session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
        request_delay_seconds: float | None = None,
    ) -> None:
        self.client = client or ESPNScheduleClient()
        self.session_factory = session_factory
        self.request_delay_seconds = (
            settings.sync_config.request_delay_seconds
            if request_delay_seconds is None
            else request_delay_seconds
        )

    def load_segment(
        self,
        segment: str,
        external_week_index: int,
        *,
        scores_only: bool = False,
    ) -> IngestionSummary:
        """Fetch one feed week and merge every event.

        Per-event parse/store failures are counted and logged; they never
        abort the rest of the batch.

        Raises:
            TransientFetchError: the feed call itself failed.
        """
        week_number = internal_week_number(segment, external_week_index)
        events = self.client.fetch_week_events(SEGMENT_SEASON_TYPES[segment], external_week_index)
        fields = LIVE_FIELDS if scores_only else None

        count = errors = inserted = updated = 0
        with self.session_factory() as session:
            for event in events:
                try:
                    game = parse_event(event, segment, week_number)
                    outcome = merge_game(session, game, fields=fields)
                except MalformedRecordError as exc:
                    errors += 1
                    logger.warning(
                        "schedule_event_malformed",
                        segment=segment,
                        week_number=week_number,
                        record_id=exc.record_id,
                        error=str(exc),
                    )
                    continue
                except PersistenceError as exc:
                    errors += 1
                    logger.warning(
                        "schedule_event_merge_failed",
                        segment=segment,
                        week_number=week_number,
                        error=str(exc),
                    )
                    continue
                except Exception as exc:
                    errors += 1
                    logger.warning(
                        "schedule_event_error",
                        segment=segment,
                        week_number=week_number,
                        error=str(exc),
                    )
                    continue
                count += 1
                if outcome == "inserted":
                    inserted += 1
                elif outcome == "updated":
                    updated += 1

        summary = IngestionSummary(count=count, errors=errors, inserted=inserted, updated=updated)
        logger.info(
            "schedule_week_loaded",
            segment=segment,
            external_week_index=external_week_index,
            week_number=week_number,
            scores_only=scores_only,
            count=summary.count,
            errors=summary.errors,
            inserted=summary.inserted,
            updated=summary.updated,
        )
        return summary

    def load_weeks(
        self,
        segment: str,
        external_week_indices: Iterable[int],
        *,
        scores_only: bool = False,
    ) -> IngestionSummary:
        """Load several feed weeks with a fixed delay between upstream requests.

        A failed fetch or a week that fails as a whole counts as one error
        and the loop moves on.
        """
        total = IngestionSummary(count=0, errors=0)
        for position, index in enumerate(external_week_indices):
            if position > 0 and self.request_delay_seconds > 0:
                time.sleep(self.request_delay_seconds)
            try:
                total = total + self.load_segment(segment, index, scores_only=scores_only)
            except TransientFetchError as exc:
                total = total + IngestionSummary(count=0, errors=1)
                logger.warning(
                    "schedule_week_fetch_failed",
                    segment=segment,
                    external_week_index=index,
                    status=exc.status_code,
                    error=str(exc),
                )
            except Exception as exc:
                total = total + IngestionSummary(count=0, errors=1)
                logger.warning(
                    "schedule_week_load_failed",
                    segment=segment,
                    external_week_index=index,
                    error=str(exc),
                )
        return total
