"""Tests for ScheduleIngestor and scoreboard event parsing."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import func, select

from conftest import build_event
from teaser_pool.db import db_models
from teaser_pool.exceptions import MalformedRecordError, PersistenceError, TransientFetchError
from teaser_pool.persistence.games import get_game_by_external_id
from teaser_pool.services.schedule_ingestion import IngestionSummary, ScheduleIngestor, parse_event


def _ingestor(client, session_factory) -> ScheduleIngestor:
    return ScheduleIngestor(client=client, session_factory=session_factory, request_delay_seconds=0)


class TestParseEvent:
    def test_sides_come_from_role_tag_not_position(self):
        home_first = parse_event(build_event(away_first=False), "regular", 1)
        away_first = parse_event(build_event(away_first=True), "regular", 1)
        assert (home_first.home_team, home_first.away_team) == ("KC", "LV")
        assert (away_first.home_team, away_first.away_team) == ("KC", "LV")

    def test_scheduled_game_carries_no_scores(self):
        update = parse_event(build_event(), "regular", 1)
        assert update.status == "scheduled"
        assert "home_score" not in update.model_fields_set
        assert update.quarter is None

    def test_live_game_carries_scores_and_clock(self):
        update = parse_event(
            build_event(status="STATUS_IN_PROGRESS", home_score="14", away_score="3", period=2, clock="4:12"),
            "regular",
            1,
        )
        assert update.status == "in_progress"
        assert (update.home_score, update.away_score) == (14, 3)
        assert (update.quarter, update.clock) == (2, "4:12")

    def test_fifth_period_is_overtime(self):
        update = parse_event(build_event(status="STATUS_IN_PROGRESS", period=5), "regular", 1)
        assert update.status == "overtime"

    def test_non_numeric_score_becomes_none(self):
        update = parse_event(build_event(status="STATUS_FINAL", home_score="", away_score="abc"), "regular", 1)
        assert update.status == "final"
        assert update.home_score is None
        assert update.away_score is None

    def test_display_name_is_normalized(self):
        event = build_event()
        event["competitions"][0]["competitors"][1]["team"] = {"displayName": "Kansas City Chiefs"}
        assert parse_event(event, "regular", 1).home_team == "KC"

    def test_missing_home_competitor_is_malformed(self):
        event = build_event()
        event["competitions"][0]["competitors"] = event["competitions"][0]["competitors"][:1]
        with pytest.raises(MalformedRecordError):
            parse_event(event, "regular", 1)

    def test_missing_date_is_malformed(self):
        event = build_event()
        event["date"] = None
        with pytest.raises(MalformedRecordError):
            parse_event(event, "regular", 1)

    def test_same_team_both_sides_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            parse_event(build_event(home="KC", away="KC"), "regular", 1)

    def test_string_status_is_malformed(self):
        event = build_event()
        event["status"] = "STATUS_FINAL"
        with pytest.raises(MalformedRecordError):
            parse_event(event, "regular", 1)

    def test_string_team_is_malformed(self):
        event = build_event()
        event["competitions"][0]["competitors"][0]["team"] = "LV"
        with pytest.raises(MalformedRecordError):
            parse_event(event, "regular", 1)

    def test_numeric_date_is_malformed(self):
        event = build_event()
        event["date"] = 20250907
        with pytest.raises(MalformedRecordError):
            parse_event(event, "regular", 1)

    def test_non_dict_event_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            parse_event(["401"], "regular", 1)


class TestLoadSegment:
    def test_ingests_events_and_applies_preseason_offset(self, session, session_factory):
        client = MagicMock()
        client.fetch_week_events.return_value = [build_event("hof-1", home="DET", away="LAC")]

        summary = _ingestor(client, session_factory).load_segment("preseason", 1)

        client.fetch_week_events.assert_called_once_with(1, 1)
        assert summary == IngestionSummary(count=1, errors=0, inserted=1, updated=0)
        game = get_game_by_external_id(session, "hof-1")
        assert (game.season_segment, game.week_number) == ("preseason", 0)

    def test_same_event_twice_is_one_row(self, session, session_factory):
        client = MagicMock()
        client.fetch_week_events.return_value = [build_event("401")]
        ingestor = _ingestor(client, session_factory)

        ingestor.load_segment("regular", 1)
        second = ingestor.load_segment("regular", 1)

        assert second.inserted == 0
        assert second.updated == 0
        rows = session.execute(
            select(func.count(db_models.PoolGame.id)).where(db_models.PoolGame.external_id == "401")
        ).scalar()
        assert rows == 1

    def test_bad_event_does_not_abort_batch(self, session, session_factory):
        broken = build_event("bad")
        broken["competitions"] = []
        client = MagicMock()
        client.fetch_week_events.return_value = [build_event("good-1"), broken, build_event("good-2", home="BUF", away="MIA")]

        summary = _ingestor(client, session_factory).load_segment("regular", 1)

        assert summary.count == 2
        assert summary.errors == 1
        assert get_game_by_external_id(session, "good-2") is not None

    def test_wrong_shape_event_keeps_rest_of_week(self, session, session_factory):
        odd = build_event("odd", home="NYG", away="WAS")
        odd["status"] = "STATUS_FINAL"
        client = MagicMock()
        client.fetch_week_events.return_value = [
            build_event("good-1"),
            odd,
            build_event("good-2", home="PHI", away="DAL"),
        ]

        summary = _ingestor(client, session_factory).load_segment("regular", 1)

        assert (summary.count, summary.errors) == (2, 1)
        rows = session.execute(select(func.count(db_models.PoolGame.id))).scalar()
        assert rows == 2

    def test_unexpected_error_is_counted(self, session, session_factory):
        client = MagicMock()
        client.fetch_week_events.return_value = [build_event("1"), build_event("2", home="BUF", away="MIA")]
        with patch(
            "teaser_pool.services.schedule_ingestion.parse_event",
            side_effect=[RuntimeError("boom"), parse_event(build_event("2", home="BUF", away="MIA"), "regular", 1)],
        ):
            summary = _ingestor(client, session_factory).load_segment("regular", 1)
        assert (summary.count, summary.errors) == (1, 1)
        assert get_game_by_external_id(session, "2") is not None

    def test_store_failure_is_counted(self, session_factory):
        client = MagicMock()
        client.fetch_week_events.return_value = [build_event("1"), build_event("2", home="BUF", away="MIA")]
        with patch(
            "teaser_pool.services.schedule_ingestion.merge_game",
            side_effect=[PersistenceError("boom"), "inserted"],
        ):
            summary = _ingestor(client, session_factory).load_segment("regular", 1)
        assert (summary.count, summary.errors, summary.inserted) == (1, 1, 1)

    def test_scores_only_keeps_spread(self, session, session_factory, make_game):
        make_game(external_id="401", spread=-3.5)
        session.commit()
        client = MagicMock()
        client.fetch_week_events.return_value = [
            build_event("401", status="STATUS_IN_PROGRESS", home_score="7", away_score="0", period=1)
        ]

        _ingestor(client, session_factory).load_segment("regular", 1, scores_only=True)

        game = get_game_by_external_id(session, "401")
        assert game.spread == -3.5
        assert (game.status, game.home_score) == ("in_progress", 7)

    def test_fetch_error_propagates(self, session_factory):
        client = MagicMock()
        client.fetch_week_events.side_effect = TransientFetchError("timeout")
        with pytest.raises(TransientFetchError):
            _ingestor(client, session_factory).load_segment("regular", 1)


class TestLoadWeeks:
    def test_failed_week_counted_and_loop_continues(self, session_factory):
        client = MagicMock()
        client.fetch_week_events.side_effect = [
            TransientFetchError("503", status_code=503),
            [build_event("w2")],
        ]
        summary = _ingestor(client, session_factory).load_weeks("regular", [1, 2])
        assert summary.errors == 1
        assert summary.count == 1
        assert client.fetch_week_events.call_count == 2

    def test_week_that_blows_up_is_counted(self, session_factory):
        client = MagicMock()
        client.fetch_week_events.side_effect = [
            RuntimeError("unexpected payload"),
            [build_event("w2")],
        ]
        summary = _ingestor(client, session_factory).load_weeks("regular", [1, 2])
        assert (summary.errors, summary.count) == (1, 1)

    def test_sleeps_between_requests(self, session_factory):
        client = MagicMock()
        client.fetch_week_events.return_value = []
        ingestor = ScheduleIngestor(client=client, session_factory=session_factory, request_delay_seconds=1.5)
        with patch("teaser_pool.services.schedule_ingestion.time.sleep") as mock_sleep:
            ingestor.load_weeks("regular", [1, 2, 3])
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(1.5)
