"""
Analytics API Endpoints

REST API for the admin analytics dashboard.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
import structlog

from marketplace_analytics.analytics import AnalyticsAggregator, AnalyticsReport
from marketplace_analytics.analytics.report import ActivityKind
from marketplace_analytics.database.models import BrandStatus
from marketplace_analytics.errors import SourceUnavailable
from marketplace_analytics.records.source import RecordSource, SQLRecordSource

router = APIRouter()
logger = structlog.get_logger(__name__)

RETRY_AFTER_SECONDS = 5


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Overview(CamelModel):
    """Headline metrics"""
    total_brands: int
    total_products: int
    total_views: int
    total_revenue: float
    brand_growth: float
    product_growth: float
    revenue_growth: float
    conversion_rate: float


class TrendPoint(CamelModel):
    """Monthly trend data point"""
    label: str
    year: int
    month: int
    brands: int
    products: int


class DistributionItem(CamelModel):
    """Category share"""
    label: str
    count: int
    percentage: int


class TopEntity(CamelModel):
    """Ranked brand"""
    id: str
    name: str
    product_count: int
    revenue: float
    clicks: int
    status: Optional[BrandStatus]
    join_date: Optional[datetime]


class ActivityItem(CamelModel):
    """Recent activity entry"""
    kind: ActivityKind
    actor_name: str
    secondary_name: Optional[str]
    timestamp: datetime


class StatusBreakdownResponse(CamelModel):
    """Counts per status value"""
    brands: Dict[str, int]
    products: Dict[str, int]


class AnalyticsReportResponse(CamelModel):
    """Admin analytics report"""
    generated_at: datetime
    is_empty: bool
    overview: Overview
    trend: List[TrendPoint]
    distribution: List[DistributionItem]
    top_entities: List[TopEntity]
    activity: List[ActivityItem]
    status_breakdown: StatusBreakdownResponse

    @classmethod
    def from_report(cls, report: AnalyticsReport) -> "AnalyticsReportResponse":
        return cls.model_validate(report)


def get_record_source() -> RecordSource:
    """FastAPI dependency for the record source."""
    return SQLRecordSource()


def get_aggregator(
    request: Request,
    source: RecordSource = Depends(get_record_source),
) -> AnalyticsAggregator:
    """FastAPI dependency for the report aggregator, configured from the app settings."""
    return AnalyticsAggregator(source, request.app.state.settings.analytics)


@router.get("/report", response_model=AnalyticsReportResponse)
async def get_analytics_report(
    now: Optional[datetime] = Query(None, description="Reference instant, defaults to the current UTC time"),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
):
    """
    Get the admin analytics report.

    Recomputed on every request. A failed source read returns 503 with a
    retry hint instead of a partial report.
    """
    reference = now or datetime.now(timezone.utc)
    logger.info("get_analytics_report called", now=reference.isoformat())

    try:
        report = await aggregator.build_report(reference)
    except SourceUnavailable as e:
        logger.warning("Analytics report unavailable", read=e.read, error=str(e))
        return JSONResponse(
            status_code=503,
            content={
                "error": "source_unavailable",
                "retryable": e.retryable,
                "detail": str(e),
            },
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    if report.is_empty:
        logger.info("Analytics report is empty")
    return AnalyticsReportResponse.from_report(report)
