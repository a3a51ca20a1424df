"""
Record Source

Read-only access to the brand and product collections. Every read opens
its own session so the aggregator can run them concurrently, and every
failure surfaces as ``SourceUnavailable``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from marketplace_analytics.database.connection import get_session_factory
from marketplace_analytics.database.models import (
    Brand,
    BrandStatus,
    Product,
    ProductMetricsDaily,
    ProductStatus,
)
from marketplace_analytics.errors import SourceUnavailable
from marketplace_analytics.records.types import (
    BrandRecord,
    EngagementRecord,
    ProductRecord,
    normalize_brand_ref,
    to_naive_utc,
    to_price,
)

logger = structlog.get_logger(__name__)


class RecordSource(ABC):
    """
    Contract consumed by the aggregator.

    ``created_after`` is inclusive, ``created_before`` exclusive. Results
    are newest first; no filter means all-time.
    """

    @abstractmethod
    async def fetch_brands(
        self,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        status: Optional[BrandStatus] = None,
        limit: Optional[int] = None,
    ) -> List[BrandRecord]:
        ...

    @abstractmethod
    async def fetch_products(
        self,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        status: Optional[ProductStatus] = None,
        limit: Optional[int] = None,
    ) -> List[ProductRecord]:
        ...

    @abstractmethod
    async def fetch_engagement(self) -> Dict[str, EngagementRecord]:
        """Summed counters keyed by product id"""
        ...


def brand_record_from_row(row: Brand) -> BrandRecord:
    return BrandRecord(
        id=str(row.id),
        name=row.name,
        status=BrandStatus(row.status),
        created_at=to_naive_utc(row.created_at),
    )


def product_record_from_row(row: Product) -> ProductRecord:
    brand = normalize_brand_ref(row.brand)
    brand_id = row.brand_id or (brand.id if brand else None)
    return ProductRecord(
        id=str(row.id),
        brand_id=str(brand_id) if brand_id is not None else None,
        name=row.name,
        category=row.category,
        status=ProductStatus(row.status),
        price=to_price(row.current_price),
        created_at=to_naive_utc(row.created_at),
        brand=brand,
    )


class SQLRecordSource(RecordSource):
    """
    Record source over the marketplace tables.

    Example:
        source = SQLRecordSource()
        brands = await source.fetch_brands(created_after=cutoff)
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    async def _execute(self, read: str, query: Any, scalars: bool = True) -> List[Any]:
        try:
            factory = self._session_factory or get_session_factory()
            async with factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all() if scalars else result.all()
        except (SQLAlchemyError, OSError, RuntimeError) as e:
            logger.error(
                "Record source read failed",
                read=read,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise SourceUnavailable(read, e) from e

        logger.debug("Record source read completed", read=read, rows=len(rows))
        return list(rows)

    @staticmethod
    def _conditions(model: Any, created_after, created_before, status) -> list:
        conditions = []
        if created_after is not None:
            conditions.append(model.created_at >= to_naive_utc(created_after))
        if created_before is not None:
            conditions.append(model.created_at < to_naive_utc(created_before))
        if status is not None:
            conditions.append(model.status == status)
        return conditions

    async def fetch_brands(
        self,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        status: Optional[BrandStatus] = None,
        limit: Optional[int] = None,
    ) -> List[BrandRecord]:
        query = select(Brand).order_by(Brand.created_at.desc(), Brand.id)
        conditions = self._conditions(Brand, created_after, created_before, status)
        if conditions:
            query = query.where(and_(*conditions))
        if limit is not None:
            query = query.limit(limit)

        rows = await self._execute("brands", query)
        return [brand_record_from_row(row) for row in rows]

    async def fetch_products(
        self,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        status: Optional[ProductStatus] = None,
        limit: Optional[int] = None,
    ) -> List[ProductRecord]:
        query = (
            select(Product)
            .options(joinedload(Product.brand))
            .order_by(Product.created_at.desc(), Product.id)
        )
        conditions = self._conditions(Product, created_after, created_before, status)
        if conditions:
            query = query.where(and_(*conditions))
        if limit is not None:
            query = query.limit(limit)

        rows = await self._execute("products", query)
        return [product_record_from_row(row) for row in rows]

    async def fetch_engagement(self) -> Dict[str, EngagementRecord]:
        query = select(
            ProductMetricsDaily.product_id,
            func.coalesce(func.sum(ProductMetricsDaily.views), 0).label("views"),
            func.coalesce(func.sum(ProductMetricsDaily.clicks), 0).label("clicks"),
        ).group_by(ProductMetricsDaily.product_id)

        rows = await self._execute("engagement", query, scalars=False)
        return {
            str(row.product_id): EngagementRecord(
                product_id=str(row.product_id),
                views=int(row.views),
                clicks=int(row.clicks),
            )
            for row in rows
        }
