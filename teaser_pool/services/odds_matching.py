"""Odds → game matching. Writes the spread column and nothing else."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable

from sqlalchemy.orm import Session

from ..db import get_session
from ..exceptions import AmbiguousMatchError, MalformedRecordError, PersistenceError
from ..logging import logger
from ..normalization import normalize
from ..odds.client import OddsAPIClient
from ..persistence.games import find_games_in_window, update_spread
from ..utils.datetime_utils import day_window, parse_iso_datetime
from ..utils.parsing import parse_float


@dataclass(frozen=True)
class OddsSummary:
    updated: int = 0
    unchanged: int = 0
    unmatched: int = 0
    ambiguous: int = 0
    errors: int = 0


@dataclass(frozen=True)
class OddsEntry:
    home_raw: str
    away_raw: str
    commence_time: datetime
    home_spread: float | None
    event_id: str | None = None


def extract_home_spread(entry: dict) -> float | None:
    """Home-relative spread from the first bookmaker's first usable spreads market.

    The outcome whose name equals the entry's raw home team name supplies
    the point value.

    Raises:
        MalformedRecordError: bookmakers, markets or outcomes are not objects.
    """
    try:
        bookmakers = entry.get("bookmakers") or []
        if not bookmakers:
            return None
        for market in bookmakers[0].get("markets") or []:
            outcomes = market.get("outcomes") or []
            if market.get("key") != "spreads" or len(outcomes) < 2:
                continue
            for outcome in outcomes:
                if outcome.get("name") == entry.get("home_team"):
                    return parse_float(outcome.get("point"))
            return None
    except (AttributeError, TypeError, KeyError) as exc:
        raise MalformedRecordError(
            f"odds entry has an unexpected bookmaker shape: {exc}", record_id=entry.get("id")
        ) from exc
    return None


def parse_odds_entry(entry: dict) -> OddsEntry:
    """Validate the fields the matcher needs.

    Raises:
        MalformedRecordError: team names or commence time are missing or not
            strings, or the bookmaker block has the wrong shape.
    """
    if not isinstance(entry, dict):
        raise MalformedRecordError("odds entry is not an object")
    event_id = entry.get("id")
    home_raw = entry.get("home_team")
    away_raw = entry.get("away_team")
    if not home_raw or not away_raw:
        raise MalformedRecordError("odds entry missing team names", record_id=event_id)
    if not isinstance(home_raw, str) or not isinstance(away_raw, str):
        raise MalformedRecordError("odds entry team names are not strings", record_id=event_id)
    commence = parse_iso_datetime(entry.get("commence_time"))
    if commence is None:
        raise MalformedRecordError("odds entry missing commence_time", record_id=event_id)
    return OddsEntry(
        home_raw=home_raw,
        away_raw=away_raw,
        commence_time=commence,
        home_spread=extract_home_spread(entry),
        event_id=event_id,
    )


class OddsMatcher:
    """Applies odds batches to stored games for a single (segment, week)."""

    def __init__(
        self,
        client: OddsAPIClient | None = None,
        session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
    ) -> None:
        self._client = client
        self.session_factory = session_factory

    @property
    def client(self) -> OddsAPIClient:
        if self._client is None:
            self._client = OddsAPIClient()
        return self._client

    def _apply_entry(
        self,
        session: Session,
        entry: OddsEntry,
        segment: str,
        week_number: int,
    ) -> tuple[str, bool]:
        """Match one entry and write its spread. Returns (outcome, ambiguous).

        Raises:
            PersistenceError: the lookup or the spread write failed.
        """
        home = normalize(entry.home_raw)
        away = normalize(entry.away_raw)
        window_start, window_end = day_window(entry.commence_time)
        candidates = find_games_in_window(
            session,
            segment=segment,
            week_number=week_number,
            home_team=home,
            away_team=away,
            window_start=window_start,
            window_end=window_end,
        )

        if not candidates:
            logger.debug(
                "odds_entry_unmatched",
                home=home,
                away=away,
                commence_time=entry.commence_time.isoformat(),
            )
            return "unmatched", False

        ambiguous = len(candidates) > 1
        if ambiguous:
            warning = AmbiguousMatchError(
                f"{away}@{home} matched {len(candidates)} games",
                candidate_ids=[game.id for game in candidates],
            )
            logger.warning(
                "odds_entry_ambiguous",
                error=str(warning),
                candidate_ids=warning.candidate_ids,
                chosen_id=candidates[0].id,
            )

        game = candidates[0]
        if entry.home_spread is None or entry.home_spread == game.spread:
            return "unchanged", ambiguous

        if not update_spread(session, game.id, entry.home_spread):
            return "unchanged", ambiguous
        logger.info(
            "odds_spread_updated",
            game_id=game.id,
            home=home,
            away=away,
            previous=game.spread,
            spread=entry.home_spread,
        )
        return "updated", ambiguous

    def apply_odds(
        self,
        odds_batch: Iterable[dict],
        segment: str,
        week_number: int,
    ) -> OddsSummary:
        """Apply every entry of an odds batch to games of one (segment, week).

        A failure on one entry is counted in ``errors`` and logged; the rest
        of the batch is still applied.
        """
        counts = {"updated": 0, "unchanged": 0, "unmatched": 0}
        ambiguous = errors = 0

        with self.session_factory() as session:
            for raw_entry in odds_batch:
                try:
                    entry = parse_odds_entry(raw_entry)
                    outcome, was_ambiguous = self._apply_entry(session, entry, segment, week_number)
                except MalformedRecordError as exc:
                    errors += 1
                    logger.warning("odds_entry_malformed", record_id=exc.record_id, error=str(exc))
                    continue
                except PersistenceError as exc:
                    errors += 1
                    logger.warning("odds_entry_store_failed", error=str(exc))
                    continue
                except Exception as exc:
                    errors += 1
                    logger.warning("odds_entry_error", error=str(exc))
                    continue
                counts[outcome] += 1
                if was_ambiguous:
                    ambiguous += 1

        summary = OddsSummary(
            updated=counts["updated"],
            unchanged=counts["unchanged"],
            unmatched=counts["unmatched"],
            ambiguous=ambiguous,
            errors=errors,
        )
        logger.info(
            "odds_applied",
            segment=segment,
            week_number=week_number,
            updated=summary.updated,
            unchanged=summary.unchanged,
            unmatched=summary.unmatched,
            ambiguous=summary.ambiguous,
            errors=summary.errors,
        )
        return summary

    def sync_week_odds(self, segment: str, week_number: int) -> OddsSummary:
        """Fetch the current odds board and apply it to one week.

        Raises:
            TransientFetchError: the odds feed call failed.
        """
        batch = self.client.fetch_spreads()
        return self.apply_odds(batch, segment, week_number)
