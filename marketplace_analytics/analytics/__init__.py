"""
Analytics Aggregation Module
"""
from .aggregator import AnalyticsAggregator
from .report import (
    ActivityEvent,
    ActivityKind,
    AnalyticsReport,
    DistributionEntry,
    OverviewMetrics,
    RankedEntity,
    StatusBreakdown,
    TimeBucket,
)

__all__ = [
    "AnalyticsAggregator",
    "ActivityEvent",
    "ActivityKind",
    "AnalyticsReport",
    "DistributionEntry",
    "OverviewMetrics",
    "RankedEntity",
    "StatusBreakdown",
    "TimeBucket",
]
