"""Tests for administrative persistence operations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from teaser_pool.persistence.admin import (
    advance_week,
    clear_pick_deadline,
    parse_deadline,
    reset_games,
    set_pick_deadline,
    set_picks_locked,
)
from teaser_pool.persistence.games import query_games
from teaser_pool.persistence.weeks import get_current_week, set_current_week


class TestResetGames:
    def test_scoped_reset(self, session, make_game):
        make_game(week_number=1)
        make_game(week_number=2, home_team="BUF", away_team="MIA")
        result = reset_games(session, segment="regular", week_number=1)
        assert result["deleted"] == 1
        assert query_games(session, "regular", 1) == []
        assert len(query_games(session, "regular", 2)) == 1

    def test_full_reset(self, session, make_game):
        make_game(week_number=1)
        make_game(week_number=0, season_segment="preseason", home_team="NYG", away_team="NE")
        assert reset_games(session)["deleted"] == 2


class TestDeadlines:
    def test_parse_deadline_is_pacific_time(self):
        # 10:00 PDT == 17:00 UTC
        assert parse_deadline("2025-09-07 10:00") == datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc)

    def test_parse_deadline_rejects_bad_format(self):
        with pytest.raises(ValueError):
            parse_deadline("Sunday 10am")

    def test_set_and_clear(self, session):
        week = set_current_week(session, "regular", 1)
        deadline = datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc)
        set_pick_deadline(session, week, deadline)
        assert week.pick_deadline == deadline
        clear_pick_deadline(session, week)
        assert week.pick_deadline is None

    def test_lock_toggle(self, session):
        week = set_current_week(session, "regular", 1)
        set_picks_locked(session, week)
        assert week.picks_locked is True
        set_picks_locked(session, week, locked=False)
        assert week.picks_locked is False


class TestAdvanceWeek:
    def test_moves_to_next_calendar_week(self, session):
        set_current_week(session, "regular", 1)
        advanced = advance_week(session)
        assert (advanced.season_segment, advanced.week_number) == ("regular", 2)
        assert get_current_week(session).id == advanced.id

    def test_crosses_segment_boundary(self, session):
        set_current_week(session, "preseason", 3)
        advanced = advance_week(session)
        assert (advanced.season_segment, advanced.week_number) == ("regular", 1)

    def test_no_current_week(self, session):
        assert advance_week(session) is None

    def test_season_complete(self, session):
        set_current_week(session, "postseason", 5)
        assert advance_week(session) is None
        assert get_current_week(session).week_number == 5
