"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import os
from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

# Set required environment variables before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("ENVIRONMENT", "development")

from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from teaser_pool.db import Base, db_models  # noqa: E402


@pytest.fixture
def engine():
    """In-memory SQLite engine with working SAVEPOINT support."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def session_factory(session):
    """Stand-in for get_session() that commits on the shared test session."""

    @contextmanager
    def _factory():
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    return _factory


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx client."""
    client = MagicMock()
    client.get.return_value = MagicMock(status_code=200, json=lambda: {}, text="")
    return client


@pytest.fixture
def make_game(session):
    """Insert a PoolGame row with sensible defaults."""
    counter = {"n": 0}

    def _make(**kwargs) -> db_models.PoolGame:
        counter["n"] += 1
        values = {
            "external_id": f"evt-{counter['n']}",
            "home_team": "KC",
            "away_team": "LV",
            "game_date": datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc),
            "status": "scheduled",
            "season_segment": "regular",
            "week_number": 1,
        }
        values.update(kwargs)
        game = db_models.PoolGame(**values)
        session.add(game)
        session.flush()
        return game

    return _make


def build_event(
    event_id: str = "401671789",
    *,
    home: str = "KC",
    away: str = "LV",
    home_score: str | None = "0",
    away_score: str | None = "0",
    status: str = "STATUS_SCHEDULED",
    period: int = 0,
    clock: str = "0:00",
    date: str = "2025-09-07T17:00Z",
    away_first: bool = True,
) -> dict:
    """Scoreboard event shaped like the ESPN feed."""
    home_entry = {"homeAway": "home", "team": {"abbreviation": home}, "score": home_score}
    away_entry = {"homeAway": "away", "team": {"abbreviation": away}, "score": away_score}
    competitors = [away_entry, home_entry] if away_first else [home_entry, away_entry]
    return {
        "id": event_id,
        "date": date,
        "competitions": [{"competitors": competitors}],
        "status": {
            "period": period,
            "displayClock": clock,
            "type": {"name": status},
        },
    }


def build_odds_entry(
    *,
    home: str = "Kansas City Chiefs",
    away: str = "Las Vegas Raiders",
    commence_time: str = "2025-09-07T17:00:00Z",
    home_point: float | None = -3.5,
) -> dict:
    """Odds entry shaped like The Odds API v4 response."""
    outcomes = [{"name": away, "price": -110, "point": -(home_point or 0)}]
    if home_point is not None:
        outcomes.append({"name": home, "price": -110, "point": home_point})
    else:
        outcomes.append({"name": "Someone Else", "price": -110, "point": 1.0})
    return {
        "id": "odds-1",
        "sport_key": "americanfootball_nfl",
        "commence_time": commence_time,
        "home_team": home,
        "away_team": away,
        "bookmakers": [
            {
                "key": "draftkings",
                "markets": [{"key": "spreads", "outcomes": outcomes}],
            }
        ],
    }
