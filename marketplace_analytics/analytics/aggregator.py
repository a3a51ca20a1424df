"""
Analytics Aggregator

Builds the admin analytics report. All source reads for one report are
issued concurrently and awaited jointly; any failed read aborts the run
with a single ``SourceUnavailable`` and no report.
"""

import asyncio
import time
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Awaitable, Dict, Optional

import structlog

from marketplace_analytics.analytics.activity import (
    brand_joined_events,
    merge_activity,
    product_added_events,
)
from marketplace_analytics.analytics.bucketing import bucket_records, window_start
from marketplace_analytics.analytics.distribution import build_distribution
from marketplace_analytics.analytics.growth import growth_rate, ratio_percent
from marketplace_analytics.analytics.ranking import rank_parents
from marketplace_analytics.analytics.report import (
    AnalyticsReport,
    OverviewMetrics,
    StatusBreakdown,
)
from marketplace_analytics.config import AnalyticsSettings, get_settings
from marketplace_analytics.database.models import BrandStatus, ProductStatus
from marketplace_analytics.errors import SourceUnavailable
from marketplace_analytics.records.source import RecordSource
from marketplace_analytics.records.types import to_naive_utc

logger = structlog.get_logger(__name__)


def status_counts(records, statuses) -> Dict[str, int]:
    """Zero-filled count per status value."""
    counts = Counter(record.status for record in records)
    return {status.value: counts.get(status, 0) for status in statuses}


def revenue_of(products) -> float:
    """Summed listing prices; a negative stored price contributes nothing."""
    return sum(max(p.price, 0.0) for p in products)


class AnalyticsAggregator:
    """
    Report orchestrator.

    Holds no state between runs; concurrent ``build_report`` calls are
    independent of each other.

    Example:
        aggregator = AnalyticsAggregator(SQLRecordSource())
        report = await aggregator.build_report(now=datetime.now(timezone.utc))
    """

    def __init__(self, source: RecordSource, settings: Optional[AnalyticsSettings] = None):
        self.source = source
        self.settings = settings or get_settings().analytics

    def _reads(self, now: datetime) -> Dict[str, Awaitable[Any]]:
        cfg = self.settings
        cutoff = now - timedelta(days=cfg.baseline_days)
        # An empty window still reads, from "now", so the result is empty
        trend_start = window_start(cfg.trend_window_months, now) or now

        return {
            "brands": self.source.fetch_brands(),
            "products": self.source.fetch_products(),
            "baseline_brands": self.source.fetch_brands(created_before=cutoff),
            "baseline_products": self.source.fetch_products(created_before=cutoff),
            "trend_brands": self.source.fetch_brands(created_after=trend_start),
            "trend_products": self.source.fetch_products(created_after=trend_start),
            "recent_brands": self.source.fetch_brands(limit=cfg.activity_slice_size),
            "recent_products": self.source.fetch_products(limit=cfg.activity_slice_size),
            "engagement": self.source.fetch_engagement(),
        }

    async def _read_all(self, now: datetime) -> Dict[str, Any]:
        tasks = {name: asyncio.ensure_future(read) for name, read in self._reads(now).items()}

        try:
            await asyncio.wait_for(
                asyncio.gather(*tasks.values()),
                timeout=self.settings.read_timeout_seconds,
            )
        except SourceUnavailable as e:
            logger.error("Analytics source read failed", read=e.read, error=str(e))
            raise
        except asyncio.TimeoutError as e:
            logger.error(
                "Analytics source reads timed out",
                timeout_seconds=self.settings.read_timeout_seconds,
                pending=[name for name, task in tasks.items() if not task.done()],
            )
            raise SourceUnavailable("timeout", e) from e
        except Exception as e:
            failed = next(
                (name for name, task in tasks.items()
                 if task.done() and not task.cancelled() and task.exception() is e),
                "unknown",
            )
            logger.error(
                "Analytics source read failed",
                read=failed,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise SourceUnavailable(failed, e) from e
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
                elif not task.cancelled():
                    # Mark secondary failures as retrieved
                    task.exception()

        return {name: task.result() for name, task in tasks.items()}

    async def build_report(self, now: datetime) -> AnalyticsReport:
        """
        Read, aggregate and assemble one report.

        Args:
            now: Reference instant for windows and baselines

        Raises:
            SourceUnavailable: If any read failed or the reads timed out
        """
        now = to_naive_utc(now)
        start = time.perf_counter()
        logger.info("Building analytics report", now=now.isoformat())

        reads = await self._read_all(now)
        report = self.assemble(now, reads)

        logger.info(
            "Analytics report built",
            brands=report.overview.total_brands,
            products=report.overview.total_products,
            top_entities=len(report.top_entities),
            activity=len(report.activity),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return report

    def assemble(self, now: datetime, reads: Dict[str, Any]) -> AnalyticsReport:
        """Pure computation over the settled reads."""
        cfg = self.settings
        brands = reads["brands"]
        products = reads["products"]
        baseline_products = reads["baseline_products"]
        engagement = reads["engagement"]

        revenue = revenue_of(products)
        baseline_revenue = revenue_of(baseline_products)
        active_products = sum(1 for p in products if p.status == ProductStatus.ACTIVE)
        total_views = sum(engagement[p.id].views for p in products if p.id in engagement)

        overview = OverviewMetrics(
            total_brands=len(brands),
            total_products=len(products),
            total_views=total_views,
            total_revenue=revenue,
            brand_growth=growth_rate(len(brands), len(reads["baseline_brands"])),
            product_growth=growth_rate(len(products), len(baseline_products)),
            revenue_growth=growth_rate(revenue, baseline_revenue),
            conversion_rate=ratio_percent(active_products, len(products)),
        )

        trend = bucket_records(
            cfg.trend_window_months,
            now,
            (b.created_at for b in reads["trend_brands"]),
            (p.created_at for p in reads["trend_products"]),
        )

        distribution = build_distribution(products, "category", fallback=cfg.uncategorized_label)

        top_entities = rank_parents(
            products,
            {brand.id: brand for brand in brands},
            limit=cfg.top_entities_limit,
            engagement=engagement,
        )

        activity = merge_activity(
            brand_joined_events(reads["recent_brands"]),
            product_added_events(reads["recent_products"]),
            cap=cfg.activity_feed_cap,
        )

        status_breakdown = StatusBreakdown(
            brands=status_counts(brands, BrandStatus),
            products=status_counts(products, ProductStatus),
        )

        return AnalyticsReport(
            generated_at=now,
            overview=overview,
            trend=trend,
            distribution=distribution,
            top_entities=top_entities,
            activity=activity,
            status_breakdown=status_breakdown,
        )
