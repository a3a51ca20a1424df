"""
Distribution Builder

Breaks a record set down by a categorical field.
"""

import math
from operator import attrgetter
from typing import Any, Callable, Iterable, List, Optional, Union

import polars as pl

from marketplace_analytics.analytics.report import DistributionEntry

UNCATEGORIZED = "Uncategorized"


def _label(value: Optional[Any], fallback: str) -> str:
    if value is None:
        return fallback
    label = str(value).strip()
    return label or fallback


def round_percent(count: int, total: int) -> int:
    """Share of ``total`` as a whole percentage, halves rounded up."""
    if total == 0:
        return 0
    return int(math.floor(count * 100 / total + 0.5))


def build_distribution(
    records: Iterable[Any],
    key: Union[str, Callable[[Any], Optional[Any]]],
    fallback: str = UNCATEGORIZED,
) -> List[DistributionEntry]:
    """
    Count records per label.

    Args:
        records: Records to break down
        key: Attribute name or callable giving each record's label
        fallback: Label for records whose label is missing or blank

    Returns:
        One entry per label, in order of first occurrence
    """
    extract = attrgetter(key) if isinstance(key, str) else key
    labels = [_label(extract(record), fallback) for record in records]
    if not labels:
        return []

    counts = (
        pl.DataFrame({"label": labels}, schema={"label": pl.Utf8})
        .group_by("label", maintain_order=True)
        .agg(pl.len().alias("count"))
    )

    total = len(labels)
    return [
        DistributionEntry(
            label=row["label"],
            count=int(row["count"]),
            percentage=round_percent(row["count"], total),
        )
        for row in counts.iter_rows(named=True)
    ]
