"""
Test Suite Configuration
"""
import asyncio
from datetime import datetime
from typing import AsyncGenerator, Callable, Dict, Iterable, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace_analytics.config import AnalyticsSettings, Settings
from marketplace_analytics.database.connection import build_engine, build_session_factory, create_schema
from marketplace_analytics.database.models import BrandStatus, ProductStatus
from marketplace_analytics.errors import SourceUnavailable
from marketplace_analytics.records.source import RecordSource
from marketplace_analytics.records.types import (
    BrandRecord,
    BrandRef,
    EngagementRecord,
    ProductRecord,
)

NOW = datetime(2025, 6, 15, 12, 0, 0)


class FakeRecordSource(RecordSource):
    """
    In-memory record source with the same filter semantics as the SQL one.

    ``fail_on`` names reads ("brands", "products", "engagement") that raise;
    ``delay`` makes every read yield to the loop before answering.
    """

    def __init__(
        self,
        brands: Iterable[BrandRecord] = (),
        products: Iterable[ProductRecord] = (),
        engagement: Optional[Dict[str, EngagementRecord]] = None,
        fail_on: Iterable[str] = (),
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.brands = list(brands)
        self.products = list(products)
        self.engagement = engagement or {}
        self.fail_on = set(fail_on)
        self.error = error
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _answer(self, read: str, rows):
        self.calls.append(read)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if read in self.fail_on:
                raise self.error or SourceUnavailable(read)
            return rows
        finally:
            self.in_flight -= 1

    @staticmethod
    def _filter(records, created_after, created_before, status, limit):
        rows = [
            r for r in records
            if (created_after is None or r.created_at >= created_after)
            and (created_before is None or r.created_at < created_before)
            and (status is None or r.status == status)
        ]
        rows.sort(key=lambda r: r.id)
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[:limit] if limit is not None else rows

    async def fetch_brands(self, created_after=None, created_before=None, status=None, limit=None):
        return await self._answer(
            "brands", self._filter(self.brands, created_after, created_before, status, limit)
        )

    async def fetch_products(self, created_after=None, created_before=None, status=None, limit=None):
        return await self._answer(
            "products", self._filter(self.products, created_after, created_before, status, limit)
        )

    async def fetch_engagement(self):
        return await self._answer("engagement", dict(self.engagement))


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant"""
    return NOW


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    """Default aggregation settings, independent of the environment"""
    return AnalyticsSettings(
        trend_window_months=6,
        baseline_days=30,
        top_entities_limit=10,
        activity_slice_size=5,
        activity_feed_cap=8,
        uncategorized_label="Uncategorized",
        read_timeout_seconds=5.0,
    )


@pytest.fixture
def make_brand() -> Callable[..., BrandRecord]:
    """Factory for brand records"""
    def _make(
        brand_id: str,
        name: Optional[str] = None,
        status: BrandStatus = BrandStatus.ACTIVE,
        created_at: datetime = NOW,
    ) -> BrandRecord:
        return BrandRecord(
            id=brand_id,
            name=name or f"Brand {brand_id}",
            status=status,
            created_at=created_at,
        )
    return _make


@pytest.fixture
def make_product() -> Callable[..., ProductRecord]:
    """Factory for product records; ``brand`` is a BrandRecord or None"""
    def _make(
        product_id: str,
        brand: Optional[BrandRecord] = None,
        category: Optional[str] = "Tops",
        status: ProductStatus = ProductStatus.ACTIVE,
        price: float = 10.0,
        created_at: datetime = NOW,
        name: Optional[str] = None,
    ) -> ProductRecord:
        return ProductRecord(
            id=product_id,
            brand_id=brand.id if brand else None,
            name=name or f"Product {product_id}",
            category=category,
            status=status,
            price=price,
            created_at=created_at,
            brand=BrandRef(id=brand.id, name=brand.name, status=brand.status) if brand else None,
        )
    return _make


@pytest.fixture
def fake_source() -> Callable[..., FakeRecordSource]:
    """Factory for in-memory record sources"""
    return FakeRecordSource


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a file-backed SQLite database with the schema created"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    await create_schema(engine)

    yield build_session_factory(engine)

    await engine.dispose()
