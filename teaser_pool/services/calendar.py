"""Static season calendar: which (segment, week) a date belongs to.

Weeks run Tuesday through Monday. Segment anchors and lengths come from
PoolConfig so a new season is a config change, not a code change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache

from ..config import PoolConfig, settings
from ..models import WeekKey

# internal week_number = external week index + offset
SEGMENT_WEEK_OFFSETS: dict[str, int] = {
    "preseason": -1,  # feed week 1 is the Hall of Fame game, stored as week 0
    "regular": 0,
    "postseason": 0,
}

# Feed season-type codes per segment
SEGMENT_SEASON_TYPES: dict[str, int] = {
    "preseason": 1,
    "regular": 2,
    "postseason": 3,
}


@dataclass(frozen=True)
class WeekRange:
    season_segment: str
    week_number: int
    start: date  # inclusive
    end: date  # exclusive

    @property
    def key(self) -> WeekKey:
        return WeekKey(season_segment=self.season_segment, week_number=self.week_number)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


def internal_week_number(segment: str, external_week_index: int) -> int:
    return external_week_index + SEGMENT_WEEK_OFFSETS[segment]


def external_week_index(segment: str, week_number: int) -> int:
    return week_number - SEGMENT_WEEK_OFFSETS[segment]


def build_calendar(pool: PoolConfig) -> tuple[WeekRange, ...]:
    """Expand the segment anchors into consecutive seven-day week ranges."""
    segments = (
        ("preseason", pool.preseason_start, pool.preseason_weeks),
        ("regular", pool.regular_start, pool.regular_weeks),
        ("postseason", pool.postseason_start, pool.postseason_weeks),
    )
    weeks: list[WeekRange] = []
    for segment, start, count in segments:
        first_week = internal_week_number(segment, 1)
        for offset in range(count):
            week_start = start + timedelta(days=7 * offset)
            weeks.append(
                WeekRange(
                    season_segment=segment,
                    week_number=first_week + offset,
                    start=week_start,
                    end=week_start + timedelta(days=7),
                )
            )
    return tuple(sorted(weeks, key=lambda w: w.start))


@lru_cache(maxsize=1)
def season_calendar() -> tuple[WeekRange, ...]:
    return build_calendar(settings.pool_config)


def resolve_week(day: date, calendar: tuple[WeekRange, ...] | None = None) -> WeekKey:
    """Return the week containing `day`.

    Days that fall between segments resolve to the next upcoming week;
    days after the season resolve to its final week.
    """
    weeks = calendar if calendar is not None else season_calendar()
    for week in weeks:
        if week.contains(day) or day < week.start:
            return week.key
    return weeks[-1].key


def segment_week_numbers(segment: str, calendar: tuple[WeekRange, ...] | None = None) -> list[int]:
    weeks = calendar if calendar is not None else season_calendar()
    return [w.week_number for w in weeks if w.season_segment == segment]


def next_week_key(
    segment: str,
    week_number: int,
    calendar: tuple[WeekRange, ...] | None = None,
) -> WeekKey | None:
    """The calendar week after (segment, week_number), or None at season end."""
    weeks = calendar if calendar is not None else season_calendar()
    for index, week in enumerate(weeks):
        if week.season_segment == segment and week.week_number == week_number:
            if index + 1 < len(weeks):
                return weeks[index + 1].key
            return None
    return None
