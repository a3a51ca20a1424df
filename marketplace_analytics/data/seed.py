"""
Development Database Seeding

Creates the schema and loads synthetic marketplace data.

Usage:
    python -m marketplace_analytics.data.seed
"""

import asyncio
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import insert

from marketplace_analytics.config.logging import configure_logging
from marketplace_analytics.data.generators import MarketplaceDataGenerator
from marketplace_analytics.database.connection import close_database, create_schema, get_db, init_database
from marketplace_analytics.database.models import Brand, Product, ProductMetricsDaily

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000

# Parents before children
TABLES = [
    ("brands", Brand),
    ("products", Product),
    ("product_metrics_daily", ProductMetricsDaily),
]


async def execute_batch_insert(model: Any, records: List[Dict[str, Any]]) -> int:
    """Insert records in chunks with Core inserts."""
    if not records:
        return 0

    async with get_db() as db:
        for i in range(0, len(records), CHUNK_SIZE):
            await db.execute(insert(model), records[i:i + CHUNK_SIZE])

    logger.info("Inserted records", table=model.__tablename__, count=len(records))
    return len(records)


async def seed_database(
    seed: int = 42,
    n_brands: int = 25,
    n_products: int = 300,
    url: Optional[str] = None,
) -> Dict[str, int]:
    """
    Create tables and load generated data.

    Returns:
        Inserted row count per table
    """
    engine = await init_database(url)
    await create_schema(engine)

    data = MarketplaceDataGenerator(seed=seed).generate_all(n_brands=n_brands, n_products=n_products)

    counts = {}
    for name, model in TABLES:
        counts[name] = await execute_batch_insert(model, data[name].to_dicts())

    logger.info("Database seeded", **counts)
    return counts


async def main() -> None:
    configure_logging()
    try:
        await seed_database()
    finally:
        await close_database()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
