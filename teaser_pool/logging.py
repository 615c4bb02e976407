"""structlog setup for the teaser pool sync service.

One JSON object per line on stdout; every event carries the service name
and deployment environment. Configured once at import.
"""

from __future__ import annotations

import logging

import structlog

from .config import settings

SERVICE_NAME = "teaser-pool-sync"


def resolve_log_level(level: str | None, environment: str) -> int:
    """LOG_LEVEL wins; otherwise production logs at INFO and everything else at DEBUG."""
    name = (level or ("INFO" if environment.lower() == "production" else "DEBUG")).strip().upper()
    return logging._nameToLevel.get(name, logging.INFO)


def configure_logging() -> None:
    level = resolve_log_level(settings.log_level, settings.environment)
    logging.basicConfig(level=level)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


configure_logging()

logger = structlog.get_logger(SERVICE_NAME).bind(
    service=SERVICE_NAME,
    environment=settings.environment,
)
