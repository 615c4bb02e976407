"""Tests for the full and live sync passes."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

from teaser_pool.exceptions import TransientFetchError
from teaser_pool.persistence.weeks import get_current_week, set_current_week
from teaser_pool.services.odds_matching import OddsSummary
from teaser_pool.services.schedule_ingestion import IngestionSummary
from teaser_pool.services.sync import SyncSummary, run_full_sync_pass, run_live_sync_pass

SEASON_DAY = date(2025, 9, 10)  # regular season week 2


def _ingestor(summary: IngestionSummary | None = None) -> MagicMock:
    ingestor = MagicMock()
    ingestor.load_weeks.return_value = summary or IngestionSummary(count=16, errors=0, inserted=2, updated=3)
    return ingestor


def _matcher(summary: OddsSummary | None = None) -> MagicMock:
    matcher = MagicMock()
    matcher.sync_week_odds.return_value = summary or OddsSummary(updated=4, unmatched=1)
    return matcher


class TestFullSyncPass:
    def test_sets_current_week_from_calendar(self, session, session_factory):
        summary = run_full_sync_pass(
            today=SEASON_DAY,
            ingestor=_ingestor(),
            matcher=_matcher(),
            session_factory=session_factory,
        )
        current = get_current_week(session)
        assert (current.season_segment, current.week_number) == ("regular", 2)
        assert summary.week_changed is True
        assert (summary.season_segment, summary.week_number) == ("regular", 2)

    def test_keeps_current_week_when_unchanged(self, session, session_factory):
        existing = set_current_week(session, "regular", 2)
        session.commit()
        summary = run_full_sync_pass(
            today=SEASON_DAY,
            ingestor=_ingestor(),
            matcher=_matcher(),
            session_factory=session_factory,
        )
        assert summary.week_changed is False
        assert get_current_week(session).id == existing.id

    def test_loads_every_week_of_segment_and_odds_for_current_only(self, session_factory):
        ingestor = _ingestor()
        matcher = _matcher()
        run_full_sync_pass(today=SEASON_DAY, ingestor=ingestor, matcher=matcher, session_factory=session_factory)

        ingestor.load_weeks.assert_called_once_with("regular", list(range(1, 19)))
        matcher.sync_week_odds.assert_called_once_with("regular", 2)

    def test_preseason_uses_feed_week_indices(self, session_factory):
        ingestor = _ingestor()
        run_full_sync_pass(
            today=date(2025, 8, 1),
            ingestor=ingestor,
            matcher=_matcher(),
            session_factory=session_factory,
        )
        ingestor.load_weeks.assert_called_once_with("preseason", [1, 2, 3, 4])

    def test_summary_counts(self, session_factory):
        summary = run_full_sync_pass(
            today=SEASON_DAY,
            ingestor=_ingestor(IngestionSummary(count=16, errors=2, inserted=1, updated=3)),
            matcher=_matcher(OddsSummary(updated=4, errors=1, unmatched=2)),
            session_factory=session_factory,
        )
        assert summary.updated == 7
        assert summary.errors == 3
        assert summary.odds_updated == 4
        assert summary.odds_unmatched == 2
        assert summary.games_seen == 16

    def test_odds_fetch_failure_is_counted(self, session_factory):
        matcher = MagicMock()
        matcher.sync_week_odds.side_effect = TransientFetchError("odds down", status_code=503)
        summary = run_full_sync_pass(
            today=SEASON_DAY, ingestor=_ingestor(), matcher=matcher, session_factory=session_factory
        )
        assert summary.failed is False
        assert summary.errors == 1
        assert summary.updated == 3

    def test_unexpected_error_becomes_failed_summary(self, session_factory):
        ingestor = MagicMock()
        ingestor.load_weeks.side_effect = RuntimeError("boom")
        summary = run_full_sync_pass(
            today=SEASON_DAY, ingestor=ingestor, matcher=_matcher(), session_factory=session_factory
        )
        assert summary == SyncSummary(kind="full", errors=1, failed=True, error="boom")


class TestLiveSyncPass:
    def test_skips_when_nothing_is_live(self, session_factory):
        ingestor = _ingestor()
        summary = run_live_sync_pass(today=SEASON_DAY, ingestor=ingestor, session_factory=session_factory)
        assert summary.skipped_reason == "no_live_games"
        ingestor.load_weeks.assert_not_called()

    def test_refreshes_tracked_weeks_scores_only(self, session, session_factory, make_game):
        set_current_week(session, "regular", 2)
        make_game(week_number=1, status="final")
        make_game(week_number=2, status="in_progress", home_team="BUF", away_team="MIA")
        make_game(week_number=0, season_segment="preseason", status="final", home_team="NYG", away_team="NE")
        session.commit()
        ingestor = _ingestor(IngestionSummary(count=2, errors=0, updated=1))

        summary = run_live_sync_pass(today=SEASON_DAY, ingestor=ingestor, session_factory=session_factory)

        ingestor.load_weeks.assert_called_once_with("regular", [1, 2], scores_only=True)
        assert summary.updated == 1
        assert summary.season_segment == "regular"

    def test_falls_back_to_calendar_segment(self, session, session_factory, make_game):
        make_game(week_number=0, season_segment="preseason", status="halftime")
        session.commit()
        ingestor = _ingestor()
        run_live_sync_pass(today=date(2025, 7, 31), ingestor=ingestor, session_factory=session_factory)
        ingestor.load_weeks.assert_called_once_with("preseason", [1], scores_only=True)

    def test_unexpected_error_becomes_failed_summary(self, session_factory):
        detector = MagicMock()
        detector.has_live_games.side_effect = RuntimeError("db gone")
        summary = run_live_sync_pass(detector=detector, session_factory=session_factory)
        assert summary.failed is True
        assert summary.errors == 1
        assert summary.kind == "live"
