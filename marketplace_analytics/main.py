"""
FastAPI Application

Entry point of the Marketplace Analytics API.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from marketplace_analytics import __version__
from marketplace_analytics.config import Settings, get_settings
from marketplace_analytics.config.logging import configure_logging
from marketplace_analytics.database.connection import close_database, init_database
from marketplace_analytics.errors import AnalyticsError
from marketplace_analytics.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from marketplace_analytics.serving.api.routes import analytics_router, health_router

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and open the record store for the app's lifetime."""
    configure_logging()
    settings: Settings = app.state.settings
    logger.info(
        "Starting Marketplace Analytics API",
        version=__version__,
        environment=settings.app_env,
        trend_window_months=settings.analytics.trend_window_months,
        baseline_days=settings.analytics.baseline_days,
    )

    try:
        await init_database()
    except Exception as e:
        # Stay up: readiness reports the outage and reports answer 503
        logger.warning("Record store unavailable at startup", error=str(e), error_type=type(e).__name__)

    yield

    await close_database()
    logger.info("Marketplace Analytics API stopped")


async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    """Analytics failures that escaped their route."""
    logger.error("Unhandled analytics error", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(
        status_code=503 if exc.retryable else 500,
        content={"error": "analytics_error", "retryable": exc.retryable, "detail": str(exc)},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to run with; defaults to the cached environment settings
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Marketplace Analytics API",
        description="Admin analytics report for the fashion marketplace",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_exception_handler(AnalyticsError, analytics_error_handler)

    app.include_router(health_router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(analytics_router, prefix=f"{API_PREFIX}/analytics", tags=["Analytics"])

    @app.get(f"{API_PREFIX}/info")
    async def api_info():
        """Service identity and the report windows in effect."""
        return {
            "name": "Marketplace Analytics API",
            "version": __version__,
            "environment": settings.app_env,
            "report": {
                "trendWindowMonths": settings.analytics.trend_window_months,
                "baselineDays": settings.analytics.baseline_days,
                "topEntitiesLimit": settings.analytics.top_entities_limit,
                "activityFeedCap": settings.analytics.activity_feed_cap,
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    from marketplace_analytics.server import main
    main()
