"""
Time Bucketer

Partitions creation timestamps into trailing calendar-month buckets.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from marketplace_analytics.analytics.report import TimeBucket

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

BUCKET_FIELDS = ("brands", "products")


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move ``offset`` calendar months from (year, month)."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def build_buckets(window_months: int, now: datetime) -> List[TimeBucket]:
    """
    Zero-filled buckets for the ``window_months`` months ending with the
    month of ``now``, oldest first.
    """
    if window_months <= 0:
        return []

    buckets = []
    for offset in range(window_months - 1, -1, -1):
        year, month = shift_month(now.year, now.month, -offset)
        buckets.append(TimeBucket(label=MONTH_LABELS[month - 1], year=year, month=month))
    return buckets


def window_start(window_months: int, now: datetime) -> Optional[datetime]:
    """First instant of the oldest bucket, or None for an empty window."""
    if window_months <= 0:
        return None
    year, month = shift_month(now.year, now.month, -(window_months - 1))
    return datetime(year, month, 1)


def assign(buckets: List[TimeBucket], timestamps: Iterable[datetime], field: str) -> int:
    """
    Count each timestamp into the bucket of its month.

    Timestamps outside the window are skipped.

    Returns:
        Number of timestamps that landed in a bucket
    """
    if field not in BUCKET_FIELDS:
        raise ValueError(f"Unknown bucket field: {field}")

    index = {(bucket.year, bucket.month): bucket for bucket in buckets}
    assigned = 0
    for ts in timestamps:
        bucket = index.get((ts.year, ts.month))
        if bucket is None:
            continue
        setattr(bucket, field, getattr(bucket, field) + 1)
        assigned += 1
    return assigned


def bucket_records(
    window_months: int,
    now: datetime,
    brand_timestamps: Iterable[datetime],
    product_timestamps: Iterable[datetime],
) -> List[TimeBucket]:
    """Bucket both collections into one aligned trend series."""
    buckets = build_buckets(window_months, now)
    assign(buckets, brand_timestamps, "brands")
    assign(buckets, product_timestamps, "products")
    return buckets
