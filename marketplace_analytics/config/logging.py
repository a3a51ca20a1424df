"""
Logging Configuration for Marketplace Analytics

structlog on top of stdlib logging. Application events and foreign
records (uvicorn, SQLAlchemy) share one handler and one renderer, so a
report request and the queries it issued end up in the same stream.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from marketplace_analytics.config.settings import get_settings

# Loggers that otherwise install their own handlers
ROUTED_LOGGERS = ["uvicorn", "uvicorn.error", "uvicorn.access"]

# Driver loggers, only verbose when SQL echo is on
DATABASE_LOGGERS = ["sqlalchemy.engine", "aiosqlite", "asyncpg"]


def _build_renderer(log_format: str):
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Safe to call more than once; the root handler is replaced, not stacked.

    Args:
        log_level: Override of ``LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR)
        log_format: Override of ``LOG_FORMAT`` (json or text)
    """
    settings = get_settings()
    level = (log_level or settings.logging.level).upper()
    fmt = (log_format or settings.logging.format).lower()
    numeric_level = getattr(logging, level, logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processor=_build_renderer(fmt),
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = []
        routed.propagate = True
        routed.setLevel(numeric_level)

    db_level = logging.INFO if settings.database.echo else logging.WARNING
    for name in DATABASE_LOGGERS:
        logging.getLogger(name).setLevel(db_level)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=fmt,
        environment=settings.app_env,
    )
