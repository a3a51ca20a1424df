"""
Ranking Engine

Scores brands by their products and returns the top N.

Per brand referenced by at least one product:
- product count
- revenue proxy (sum of current prices)
- clicks (sum of stored per-product click counters)

Ordering is product count descending, brand id ascending on ties.
"""

from typing import Dict, Iterable, List, Mapping, Optional

import polars as pl
import structlog

from marketplace_analytics.analytics.report import RankedEntity
from marketplace_analytics.records.types import (
    BrandRecord,
    BrandRef,
    EngagementRecord,
    ProductRecord,
)

logger = structlog.get_logger(__name__)

UNKNOWN_BRAND = "Unknown Brand"

_SCHEMA = {"brand_id": pl.Utf8, "price": pl.Float64, "clicks": pl.Int64}


def _product_frame(
    products: List[ProductRecord],
    engagement: Mapping[str, EngagementRecord],
) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "brand_id": [p.brand_id for p in products],
            "price": [max(p.price, 0.0) for p in products],
            "clicks": [
                engagement[p.id].clicks if p.id in engagement else 0
                for p in products
            ],
        },
        schema=_SCHEMA,
    )


def rank_parents(
    products: Iterable[ProductRecord],
    parents: Mapping[str, BrandRecord],
    limit: int = 10,
    engagement: Optional[Mapping[str, EngagementRecord]] = None,
) -> List[RankedEntity]:
    """
    Top ``limit`` brands by product count.

    Args:
        products: Child records; those without a brand are skipped
        parents: Brand lookup by id, source of name, status and join date
        limit: Maximum number of entries
        engagement: Stored counters by product id

    Returns:
        Ranked entities, unique by brand id
    """
    if limit <= 0:
        return []

    linked = [p for p in products if p.brand_id is not None]
    if not linked:
        return []

    # First joined reference per brand, used when the lookup misses
    refs: Dict[str, BrandRef] = {}
    for product in linked:
        if product.brand is not None and product.brand_id not in refs:
            refs[product.brand_id] = product.brand

    ranked = (
        _product_frame(linked, engagement or {})
        .group_by("brand_id")
        .agg([
            pl.len().alias("product_count"),
            pl.col("price").sum().alias("revenue"),
            pl.col("clicks").sum().alias("clicks"),
        ])
        .sort(["product_count", "brand_id"], descending=[True, False])
        .head(limit)
    )

    entities = []
    for row in ranked.iter_rows(named=True):
        brand_id = row["brand_id"]
        parent = parents.get(brand_id)
        ref = refs.get(brand_id)

        if parent is not None:
            name, status, join_date = parent.name, parent.status, parent.created_at
        else:
            logger.debug("Ranked brand missing from lookup", brand_id=brand_id)
            name = ref.name if ref is not None and ref.name else UNKNOWN_BRAND
            status = ref.status if ref is not None else None
            join_date = None

        entities.append(
            RankedEntity(
                id=brand_id,
                name=name,
                product_count=int(row["product_count"]),
                revenue=float(row["revenue"]),
                clicks=int(row["clicks"]),
                status=status,
                join_date=join_date,
            )
        )

    return entities
