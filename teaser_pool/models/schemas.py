"""Pydantic models used by feed clients, ingestion and persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


SegmentCode = Literal["preseason", "regular", "postseason"]
StatusCode = Literal[
    "scheduled", "in_progress", "halftime", "overtime", "final", "postponed", "other"
]

# Columns a merge may write besides the external_id key
MERGEABLE_FIELDS = (
    "home_team",
    "away_team",
    "game_date",
    "status",
    "season_segment",
    "week_number",
    "home_score",
    "away_score",
    "spread",
    "quarter",
    "clock",
)

# Fields carried by a live (score/status only) sync
LIVE_FIELDS = frozenset({"status", "home_score", "away_score", "quarter", "clock"})


class TeamCode(BaseModel):
    """Canonical team code produced at the ingestion boundary.

    known=False marks a raw identifier that was not in the franchise table
    and is being forwarded unchanged.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    known: bool = True

    def __str__(self) -> str:
        return self.code


class GameUpdate(BaseModel):
    """A partial or full game record headed for GameStore.merge.

    Only fields explicitly set on the instance are written on conflict,
    so a score-only update never touches spread and vice versa.
    """

    external_id: str
    home_team: str
    away_team: str
    game_date: datetime
    season_segment: SegmentCode
    week_number: int
    status: StatusCode | None = None
    home_score: int | None = None
    away_score: int | None = None
    spread: float | None = None
    quarter: int | None = None
    clock: str | None = None

    @model_validator(mode="after")
    def _teams_differ(self) -> GameUpdate:
        if self.home_team == self.away_team:
            msg = f"home_team and away_team must differ (got {self.home_team})"
            raise ValueError(msg)
        return self

    def merge_values(self, fields: frozenset[str] | None = None) -> dict:
        """Return the supplied column values, optionally narrowed to `fields`."""
        supplied = self.model_dump(include=self.model_fields_set)
        supplied.pop("external_id", None)
        if fields is not None:
            supplied = {key: value for key, value in supplied.items() if key in fields}
        return {key: value for key, value in supplied.items() if key in MERGEABLE_FIELDS}


class WeekKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    season_segment: SegmentCode
    week_number: int


class PickSubmission(BaseModel):
    pick_slot: int = Field(ge=1)
    picked_team: str
