"""Pool models: games, weeks, participants, picks."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import text

from .base import Base


class GameStatus(str, Enum):
    """Canonical game status.

    Happy path: scheduled → in_progress ⇄ halftime → overtime → final
    """

    scheduled = "scheduled"
    in_progress = "in_progress"
    halftime = "halftime"
    overtime = "overtime"
    final = "final"
    postponed = "postponed"
    other = "other"


class SeasonSegment(str, Enum):
    preseason = "preseason"
    regular = "regular"
    postseason = "postseason"


# Statuses that mean the game has kicked off (scores are meaningful)
STARTED_STATUSES = frozenset({
    GameStatus.in_progress.value,
    GameStatus.halftime.value,
    GameStatus.overtime.value,
    GameStatus.final.value,
})


class PoolGame(Base):
    """A scheduled NFL game, keyed by the schedule feed's event id."""

    __tablename__ = "pool_games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    external_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    home_team: Mapped[str] = mapped_column(String(50), nullable=False)
    away_team: Mapped[str] = mapped_column(String(50), nullable=False)
    game_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=GameStatus.scheduled.value, nullable=False, index=True
    )
    season_segment: Mapped[str] = mapped_column(String(20), nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    home_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    spread: Mapped[float | None] = mapped_column(Float, nullable=True)
    quarter: Mapped[int | None] = mapped_column(Integer, nullable=True)
    clock: Mapped[str | None] = mapped_column(String(20), nullable=True)
    last_ingested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("home_team <> away_team", name="ck_game_distinct_teams"),
        Index("idx_pool_games_segment_week", "season_segment", "week_number"),
    )

    @property
    def has_started(self) -> bool:
        return (self.status or "").lower() in STARTED_STATUSES


class PoolWeek(Base):
    """A pick week. Exactly one row carries is_current=True."""

    __tablename__ = "pool_weeks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_segment: Mapped[str] = mapped_column(String(20), nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    week_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_current: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    pick_deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    picks_locked: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    pick_count: Mapped[int] = mapped_column(Integer, default=4, nullable=False)
    tease_points: Mapped[float] = mapped_column(Float, default=14.0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    picks: Mapped[list["PoolPick"]] = relationship(
        "PoolPick", back_populates="week", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("season_segment", "week_number", name="uq_week_identity"),
        # Partial unique index: at most one current week
        Index(
            "uq_pool_weeks_single_current",
            "is_current",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current"),
        ),
    )

    @property
    def label(self) -> str:
        return self.week_name or f"Week {self.week_number}"


class PoolParticipant(Base):
    """A pool member. cumulative_winnings is owned by the settlement step."""

    __tablename__ = "pool_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    cumulative_winnings: Mapped[float] = mapped_column(
        Float, default=0.0, server_default=text("0"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    picks: Mapped[list["PoolPick"]] = relationship(
        "PoolPick", back_populates="participant", cascade="all, delete-orphan"
    )


class PoolPick(Base):
    """One of a participant's picks for a week."""

    __tablename__ = "pool_picks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pool_participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pool_weeks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pick_slot: Mapped[int] = mapped_column(Integer, nullable=False)
    picked_team: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    participant: Mapped[PoolParticipant] = relationship(
        "PoolParticipant", back_populates="picks"
    )
    week: Mapped[PoolWeek] = relationship("PoolWeek", back_populates="picks")

    __table_args__ = (
        UniqueConstraint(
            "participant_id", "week_id", "pick_slot", name="uq_pick_slot"
        ),
        CheckConstraint("pick_slot >= 1", name="ck_pick_slot_positive"),
    )
