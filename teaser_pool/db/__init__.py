"""
Database helpers for the sync service.

Synchronous session management for Celery tasks. The engine is created
lazily so tests can import modules without opening a connection.
"""

from __future__ import annotations

from contextlib import contextmanager
from types import SimpleNamespace
from typing import TYPE_CHECKING, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import settings
from ..logging import logger
from .base import Base
from .pool import (
    STARTED_STATUSES,
    GameStatus,
    PoolGame,
    PoolParticipant,
    PoolPick,
    PoolWeek,
    SeasonSegment,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# Unified namespace exposing all ORM models
db_models = SimpleNamespace(
    # Enums
    GameStatus=GameStatus,
    SeasonSegment=SeasonSegment,
    # Pool models
    PoolGame=PoolGame,
    PoolWeek=PoolWeek,
    PoolParticipant=PoolParticipant,
    PoolPick=PoolPick,
)

_engine: "Engine | None" = None
_SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> "Engine":
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            echo=settings.sql_echo,
            future=True,
            pool_pre_ping=True,
        )
    return _engine


def _get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            class_=Session,
        )
    return _SessionLocal


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Provide a transactional database session context manager.

    Commits on clean exit, rolls back and re-raises on error.

    Usage:
        with get_session() as session:
            session.add(object)
    """
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception("db_session_rollback", error=str(exc))
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create all pool tables that do not exist yet."""
    Base.metadata.create_all(get_engine())
    logger.info("db_initialized", tables=sorted(Base.metadata.tables))


__all__ = [
    "Base",
    "STARTED_STATUSES",
    "db_models",
    "get_engine",
    "get_session",
    "init_db",
]
