"""
Health Check Endpoints

Liveness, readiness and a detailed status page. The service is only ready
once every table the report reads from exists.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from marketplace_analytics.database.connection import check_database_health

router = APIRouter()

# Database status -> reason reported by the readiness check
NOT_READY_REASONS = {
    "unhealthy": "database_unavailable",
    "incomplete": "schema_incomplete",
}


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Application and record store status; ``degraded`` unless the store is fully usable."""
    settings = request.app.state.settings
    database = await check_database_health()

    return HealthResponse(
        status="healthy" if database["status"] == "healthy" else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks={"database": database},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness check: 200 while the process serves requests."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, Any]:
    """Readiness check: 503 until reports can be built."""
    database = await check_database_health()
    reason = NOT_READY_REASONS.get(database["status"])

    if reason is not None:
        response.status_code = 503
        body: Dict[str, Any] = {"status": "not_ready", "reason": reason}
        if database.get("missing_tables"):
            body["missing_tables"] = database["missing_tables"]
        return body

    return {"status": "ready"}
