"""
Activity Feed Merger

Merges brand-joined and product-added events into one recent-activity list.
"""

from itertools import chain
from operator import attrgetter
from typing import Iterable, List

from marketplace_analytics.analytics.ranking import UNKNOWN_BRAND
from marketplace_analytics.analytics.report import ActivityEvent, ActivityKind
from marketplace_analytics.records.types import BrandRecord, ProductRecord


def brand_joined_events(brands: Iterable[BrandRecord]) -> List[ActivityEvent]:
    return [
        ActivityEvent(
            kind=ActivityKind.BRAND_JOINED,
            actor_name=brand.name,
            timestamp=brand.created_at,
        )
        for brand in brands
    ]


def product_added_events(products: Iterable[ProductRecord]) -> List[ActivityEvent]:
    return [
        ActivityEvent(
            kind=ActivityKind.PRODUCT_ADDED,
            actor_name=product.brand.name if product.brand and product.brand.name else UNKNOWN_BRAND,
            secondary_name=product.name,
            timestamp=product.created_at,
        )
        for product in products
    ]


def merge_activity(*slices: Iterable[ActivityEvent], cap: int = 8) -> List[ActivityEvent]:
    """
    Newest-first feed of at most ``cap`` events.

    The sort is stable, so events sharing a timestamp keep the order in
    which the slices supplied them.
    """
    if cap <= 0:
        return []
    merged = sorted(chain.from_iterable(slices), key=attrgetter("timestamp"), reverse=True)
    return merged[:cap]
