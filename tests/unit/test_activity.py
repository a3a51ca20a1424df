"""
Unit Tests - Activity Feed Merger
"""
from datetime import datetime, timedelta

from marketplace_analytics.analytics.activity import (
    brand_joined_events,
    merge_activity,
    product_added_events,
)
from marketplace_analytics.analytics.report import ActivityEvent, ActivityKind


def event(name, ts, kind=ActivityKind.BRAND_JOINED):
    return ActivityEvent(kind=kind, actor_name=name, timestamp=ts)


class TestMergeActivity:
    """Tests for merge_activity"""

    def test_newest_first_across_slices(self, now):
        brands = [event("b1", now - timedelta(hours=1)), event("b2", now - timedelta(hours=5))]
        products = [
            event("p1", now, ActivityKind.PRODUCT_ADDED),
            event("p2", now - timedelta(hours=3), ActivityKind.PRODUCT_ADDED),
        ]

        result = merge_activity(brands, products)

        assert [e.actor_name for e in result] == ["p1", "b1", "p2", "b2"]

    def test_capped(self, now):
        brands = [event(f"b{i}", now - timedelta(minutes=i)) for i in range(5)]
        products = [event(f"p{i}", now - timedelta(minutes=i, seconds=30)) for i in range(5)]

        result = merge_activity(brands, products, cap=8)

        assert len(result) == 8
        timestamps = [e.timestamp for e in result]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_equal_timestamps_keep_input_order(self, now):
        """Stable merge, no secondary key"""
        result = merge_activity(
            [event("b1", now), event("b2", now)],
            [event("p1", now, ActivityKind.PRODUCT_ADDED)],
        )

        assert [e.actor_name for e in result] == ["b1", "b2", "p1"]

    def test_unsorted_slices(self, now):
        result = merge_activity([event("old", now - timedelta(days=2)), event("new", now)])

        assert [e.actor_name for e in result] == ["new", "old"]

    def test_empty(self):
        assert merge_activity() == []
        assert merge_activity([], []) == []

    def test_zero_cap(self, now):
        assert merge_activity([event("b1", now)], cap=0) == []


class TestEventBuilders:
    """Tests for the event constructors"""

    def test_brand_joined(self, make_brand):
        brand = make_brand("b-1", "Atelier", created_at=datetime(2025, 6, 1))

        (e,) = brand_joined_events([brand])

        assert e.kind == ActivityKind.BRAND_JOINED
        assert e.actor_name == "Atelier"
        assert e.secondary_name is None
        assert e.timestamp == datetime(2025, 6, 1)

    def test_product_added(self, make_brand, make_product):
        product = make_product("p-1", make_brand("b-1", "Atelier"), name="Linen Shirt")

        (e,) = product_added_events([product])

        assert e.kind == ActivityKind.PRODUCT_ADDED
        assert e.actor_name == "Atelier"
        assert e.secondary_name == "Linen Shirt"

    def test_product_without_brand(self, make_product):
        (e,) = product_added_events([make_product("p-1")])

        assert e.actor_name == "Unknown Brand"
