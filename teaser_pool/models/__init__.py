"""Common typed models shared across feeds and persistence."""

from .schemas import (
    LIVE_FIELDS,
    MERGEABLE_FIELDS,
    GameUpdate,
    PickSubmission,
    SegmentCode,
    StatusCode,
    TeamCode,
    WeekKey,
)

__all__ = [
    "LIVE_FIELDS",
    "MERGEABLE_FIELDS",
    "GameUpdate",
    "PickSubmission",
    "SegmentCode",
    "StatusCode",
    "TeamCode",
    "WeekKey",
]
