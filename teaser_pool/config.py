"""
Typed settings for the teaser pool sync service.

Uses Pydantic Settings to load configuration from environment variables
with validation and type safety. Settings are loaded from the root .env
file for local development.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .validate_env import validate_env


class ScheduleFeedConfig(BaseModel):
    base_url: str = Field(default="https://site.api.espn.com/apis/site/v2/sports/football/nfl")
    request_timeout_seconds: int = 15
    # Transport-level retries inside a single fetch; anything beyond waits for the next tick
    max_attempts: int = 2


class OddsProviderConfig(BaseModel):
    base_url: str = Field(default="https://api.the-odds-api.com/v4")
    api_key: str | None = None
    sport_key: str = "americanfootball_nfl"
    regions: list[str] = Field(default_factory=lambda: ["us"])
    request_timeout_seconds: int = 15


class SyncConfig(BaseModel):
    full_sync_interval_seconds: int = Field(default=300)  # 5 minutes
    live_sync_interval_seconds: int = Field(default=30)
    # Fixed delay between schedule feed requests inside one pass
    request_delay_seconds: float = Field(default=1.0)
    # Lock TTLs outlive a normal pass but expire if a worker dies mid-run
    full_sync_lock_seconds: int = Field(default=600)
    live_sync_lock_seconds: int = Field(default=120)


class PoolConfig(BaseModel):
    tease_points: float = 14.0
    pick_count: int = 4
    payout_unit: int = 5
    # How an exact tie after the tease is scored: "loss" (source behavior) or "push"
    tie_policy: Literal["loss", "push"] = "loss"
    season_year: int = 2025
    # First day (Tuesday) of the first week in each segment
    preseason_start: date = date(2025, 7, 29)
    preseason_weeks: int = 4  # Hall of Fame week is week 0
    regular_start: date = date(2025, 9, 2)
    regular_weeks: int = 18
    postseason_start: date = date(2026, 1, 6)
    postseason_weeks: int = 5


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    In Docker, environment variables are passed directly via docker-compose.
    For local development, loads from the root .env file.
    """
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="allow",
    )

    database_url: str = Field(..., alias="DATABASE_URL")

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_async_to_sync(cls, v: str) -> str:
        """Workers use synchronous SQLAlchemy, so asyncpg URLs become psycopg."""
        if isinstance(v, str) and "asyncpg" in v:
            return v.replace("asyncpg", "psycopg")
        return v

    redis_url: str = Field("redis://localhost:6379/3", alias="REDIS_URL")
    odds_api_key: str | None = Field(None, alias="ODDS_API_KEY")
    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str | None = Field(None, alias="LOG_LEVEL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")
    tease_points_override: float | None = Field(None, alias="TEASE_POINTS")
    tie_policy_override: str | None = Field(None, alias="TIE_POLICY")
    schedule_config: ScheduleFeedConfig = Field(default_factory=ScheduleFeedConfig)
    odds_config: OddsProviderConfig = Field(default_factory=OddsProviderConfig)
    sync_config: SyncConfig = Field(default_factory=SyncConfig)
    pool_config: PoolConfig = Field(default_factory=PoolConfig)

    @model_validator(mode="after")
    def _apply_overrides(self) -> Settings:
        """
        Allow flat env vars (ODDS_API_KEY / TEASE_POINTS / TIE_POLICY) to
        override the nested configs without double-underscore syntax.
        """
        if self.odds_api_key:
            self.odds_config.api_key = self.odds_api_key
        if self.tease_points_override is not None:
            self.pool_config.tease_points = self.tease_points_override
        if self.tie_policy_override:
            policy = self.tie_policy_override.strip().lower()
            if policy not in ("loss", "push"):
                raise ValueError("TIE_POLICY must be 'loss' or 'push'")
            self.pool_config.tie_policy = policy  # type: ignore[assignment]
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Settings are cached to avoid re-parsing environment variables
    on every access.
    """
    validate_env()
    return Settings()


# Global settings instance - import this in other modules
settings = get_settings()
