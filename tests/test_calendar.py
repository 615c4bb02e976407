"""Tests for the static season calendar."""

from __future__ import annotations

from datetime import date

from teaser_pool.config import PoolConfig
from teaser_pool.services.calendar import (
    build_calendar,
    external_week_index,
    internal_week_number,
    next_week_key,
    resolve_week,
    segment_week_numbers,
)

CALENDAR = build_calendar(PoolConfig())


class TestWeekNumbering:
    def test_preseason_is_offset_by_one(self):
        assert internal_week_number("preseason", 1) == 0
        assert external_week_index("preseason", 0) == 1

    def test_regular_and_postseason_unchanged(self):
        assert internal_week_number("regular", 5) == 5
        assert internal_week_number("postseason", 2) == 2
        assert external_week_index("regular", 18) == 18


class TestBuildCalendar:
    def test_segment_week_numbers(self):
        assert segment_week_numbers("preseason", CALENDAR) == [0, 1, 2, 3]
        assert segment_week_numbers("regular", CALENDAR) == list(range(1, 19))
        assert segment_week_numbers("postseason", CALENDAR) == [1, 2, 3, 4, 5]

    def test_weeks_are_seven_days(self):
        for week in CALENDAR:
            assert (week.end - week.start).days == 7


class TestResolveWeek:
    def test_first_day_of_regular_season(self):
        key = resolve_week(date(2025, 9, 2), CALENDAR)
        assert (key.season_segment, key.week_number) == ("regular", 1)

    def test_last_day_of_a_week_is_inclusive(self):
        key = resolve_week(date(2025, 9, 8), CALENDAR)
        assert (key.season_segment, key.week_number) == ("regular", 1)

    def test_hall_of_fame_week(self):
        key = resolve_week(date(2025, 7, 31), CALENDAR)
        assert (key.season_segment, key.week_number) == ("preseason", 0)

    def test_gap_between_segments_resolves_to_next_week(self):
        key = resolve_week(date(2025, 8, 28), CALENDAR)
        assert (key.season_segment, key.week_number) == ("regular", 1)

    def test_before_season_resolves_to_first_week(self):
        key = resolve_week(date(2025, 3, 1), CALENDAR)
        assert (key.season_segment, key.week_number) == ("preseason", 0)

    def test_after_season_resolves_to_last_week(self):
        key = resolve_week(date(2026, 6, 1), CALENDAR)
        assert (key.season_segment, key.week_number) == ("postseason", 5)


class TestNextWeekKey:
    def test_within_segment(self):
        key = next_week_key("regular", 4, CALENDAR)
        assert (key.season_segment, key.week_number) == ("regular", 5)

    def test_regular_to_postseason(self):
        key = next_week_key("regular", 18, CALENDAR)
        assert (key.season_segment, key.week_number) == ("postseason", 1)

    def test_unknown_week(self):
        assert next_week_key("regular", 40, CALENDAR) is None
