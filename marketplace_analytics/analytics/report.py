"""
Report Types

Values produced by one aggregation run. Everything here is rebuilt from
scratch on every run; only ``TimeBucket`` is mutated, and only while the
bucketer fills it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from marketplace_analytics.database.models import BrandStatus


class ActivityKind(str, Enum):
    """Kinds of events in the activity feed"""
    BRAND_JOINED = "brand_joined"
    PRODUCT_ADDED = "product_added"


@dataclass
class TimeBucket:
    """One calendar month of the trend series"""
    label: str  # short month name, e.g. "Jan"
    year: int
    month: int
    brands: int = 0
    products: int = 0


@dataclass(frozen=True)
class DistributionEntry:
    """Share of one category label"""
    label: str
    count: int
    percentage: int  # 0-100, rounded half up


@dataclass(frozen=True)
class RankedEntity:
    """Brand scored by its products"""
    id: str
    name: str
    product_count: int
    revenue: float  # sum of current prices
    clicks: int  # summed from stored product counters, 0 when none exist
    status: Optional[BrandStatus]
    join_date: Optional[datetime]  # None when the brand is missing from the lookup


@dataclass(frozen=True)
class ActivityEvent:
    """Entry of the recent activity feed"""
    kind: ActivityKind
    actor_name: str
    timestamp: datetime
    secondary_name: Optional[str] = None


@dataclass(frozen=True)
class OverviewMetrics:
    """Headline scalars"""
    total_brands: int = 0
    total_products: int = 0
    total_views: int = 0
    total_revenue: float = 0.0
    brand_growth: float = 0.0
    product_growth: float = 0.0
    revenue_growth: float = 0.0
    conversion_rate: float = 0.0


@dataclass(frozen=True)
class StatusBreakdown:
    """Counts per status value, every value present"""
    brands: Dict[str, int] = field(default_factory=dict)
    products: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalyticsReport:
    """Complete admin analytics report"""
    generated_at: datetime
    overview: OverviewMetrics
    trend: List[TimeBucket]
    distribution: List[DistributionEntry]
    top_entities: List[RankedEntity]
    activity: List[ActivityEvent]
    status_breakdown: StatusBreakdown

    @property
    def is_empty(self) -> bool:
        """True when the store holds no brands and no products yet"""
        return self.overview.total_brands == 0 and self.overview.total_products == 0
