"""
Integration Tests - HTTP API
"""
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from marketplace_analytics.config import AnalyticsSettings, Settings
from marketplace_analytics.database.connection import close_database, create_schema, init_database
from marketplace_analytics.main import create_app
from marketplace_analytics.serving.api.routes.analytics import get_record_source


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client_for(app):
    """Client whose report endpoint reads from the given source"""
    def _client(source) -> AsyncClient:
        app.dependency_overrides[get_record_source] = lambda: source
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    return _client


class TestReportEndpoint:
    """Tests for GET /api/v1/analytics/report"""

    async def test_report_json_shape(self, client_for, fake_source, make_brand, make_product, now):
        brand = make_brand("b-1", "Atelier", created_at=now - timedelta(days=3))
        source = fake_source(
            brands=[brand],
            products=[make_product("p-1", brand, category=None, price=42.0, created_at=now - timedelta(days=1))],
        )

        async with client_for(source) as client:
            response = await client.get("/api/v1/analytics/report", params={"now": now.isoformat()})

        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "no-store"
        body = response.json()
        assert set(body) == {
            "generatedAt",
            "isEmpty",
            "overview",
            "trend",
            "distribution",
            "topEntities",
            "activity",
            "statusBreakdown",
        }
        assert body["isEmpty"] is False
        assert body["overview"]["totalBrands"] == 1
        assert body["overview"]["totalRevenue"] == 42.0
        assert [p["label"] for p in body["trend"]] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
        assert body["distribution"] == [{"label": "Uncategorized", "count": 1, "percentage": 100}]
        assert body["topEntities"][0]["productCount"] == 1
        assert body["topEntities"][0]["status"] == "active"
        assert body["activity"][0] == {
            "kind": "product_added",
            "actorName": "Atelier",
            "secondaryName": "Product p-1",
            "timestamp": (now - timedelta(days=1)).isoformat(),
        }
        assert body["statusBreakdown"]["products"]["out_of_stock"] == 0

    async def test_empty_store_is_not_an_error(self, client_for, fake_source, now):
        async with client_for(fake_source()) as client:
            response = await client.get("/api/v1/analytics/report", params={"now": now.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["isEmpty"] is True
        assert len(body["trend"]) == 6
        assert body["topEntities"] == []
        assert body["activity"] == []

    async def test_source_unavailable_is_503(self, client_for, fake_source, make_brand):
        source = fake_source(brands=[make_brand("b-1")], fail_on={"products"})

        async with client_for(source) as client:
            response = await client.get("/api/v1/analytics/report")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        body = response.json()
        assert body["error"] == "source_unavailable"
        assert body["retryable"] is True
        assert "overview" not in body

    async def test_app_settings_reach_the_report(self, fake_source, now):
        app = create_app(Settings(app_env="testing", analytics=AnalyticsSettings(trend_window_months=3)))
        app.dependency_overrides[get_record_source] = lambda: fake_source()

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            report = await client.get("/api/v1/analytics/report", params={"now": now.isoformat()})
            info = await client.get("/api/v1/info")

        assert [p["label"] for p in report.json()["trend"]] == ["Apr", "May", "Jun"]
        assert info.json()["report"]["trendWindowMonths"] == 3

    async def test_default_now(self, client_for, fake_source):
        async with client_for(fake_source()) as client:
            response = await client.get("/api/v1/analytics/report")

        assert response.status_code == 200
        assert len(response.json()["trend"]) == 6


class TestHealthEndpoints:
    """Tests for the health checks"""

    async def test_liveness(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_health_page_reports_app_settings(self):
        app = create_app(Settings(app_env="staging", version="9.9.9"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/health")

        body = response.json()
        assert body["environment"] == "staging"
        assert body["version"] == "9.9.9"
        assert body["status"] == "degraded"

    async def test_readiness_without_database(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["reason"] == "database_unavailable"

    async def test_request_headers(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/info", headers={"X-Request-ID": "req-1"})

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "req-1"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.json()["name"] == "Marketplace Analytics API"

    async def test_readiness_follows_schema(self, app, tmp_path):
        """Reachable database without the report tables is not ready"""
        try:
            engine = await init_database(f"sqlite+aiosqlite:///{tmp_path / 'health.db'}")
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                before = await client.get("/api/v1/health/ready")
                await create_schema(engine)
                after = await client.get("/api/v1/health/ready")
                detail = await client.get("/api/v1/health")
        finally:
            await close_database()

        assert before.status_code == 503
        assert before.json()["reason"] == "schema_incomplete"
        assert "products" in before.json()["missing_tables"]
        assert after.status_code == 200
        assert detail.json()["status"] == "healthy"
        assert detail.json()["checks"]["database"]["missing_tables"] == []
