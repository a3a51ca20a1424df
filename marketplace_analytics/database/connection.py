"""
Database Connection Management

One process-wide async engine for the API and the seeder. The report fans
out into several concurrent reads, each on its own session, so the engine
is built without a shared pool and sessions never outlive a single read.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

import structlog
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from marketplace_analytics.config import get_settings
from marketplace_analytics.database.models import Base

logger = structlog.get_logger(__name__)

# Tables the analytics report reads from
REPORT_TABLES = ["brands", "products", "product_metrics_daily"]

_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Async engine for ``url`` with per-checkout connections."""
    return create_async_engine(url, echo=echo, pool_pre_ping=True, poolclass=NullPool)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory handing out short-lived read sessions."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create every mapped table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Initialize the process-wide engine and verify connectivity.

    Args:
        url: Async database URL; defaults to ``settings.database.async_url``

    Raises:
        Exception: Whatever the driver raises when the database is unreachable;
            the engine is discarded in that case
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings()
    engine = build_engine(url or settings.database.async_url, echo=settings.database.echo)

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e), error_type=type(e).__name__)
        await engine.dispose()
        raise

    _engine = engine
    _async_session_factory = build_session_factory(engine)
    logger.info("Database connection established", dialect=engine.dialect.name)
    return engine


async def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database engine disposed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _async_session_factory


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Session that commits on success and rolls back on error.

    Example:
        async with get_db() as db:
            await db.execute(insert(Brand), rows)
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        await session.rollback()
        raise
    finally:
        await session.close()


def _missing_tables(sync_conn) -> List[str]:
    existing = set(inspect(sync_conn).get_table_names())
    return [name for name in REPORT_TABLES if name not in existing]


async def check_database_health() -> Dict[str, Any]:
    """
    Connectivity and schema status.

    Returns:
        ``status`` is ``healthy`` when the database answers and every report
        table exists, ``incomplete`` when tables are missing and ``unhealthy``
        when the database cannot be reached at all
    """
    try:
        start = time.perf_counter()
        async with get_db() as db:
            await db.execute(text("SELECT 1"))
            conn = await db.connection()
            missing = await conn.run_sync(_missing_tables)
        latency_ms = (time.perf_counter() - start) * 1000
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "incomplete" if missing else "healthy",
        "latency_ms": round(latency_ms, 2),
        "missing_tables": missing,
    }
