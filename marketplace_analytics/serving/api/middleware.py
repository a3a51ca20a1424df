"""
API Middleware

- Request logging with a request id bound to every log line of the request
- Response headers: security hardening, no caching of analytics reports
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

# Orchestrator health checks, logged at debug to keep the access log readable
QUIET_PATH_PREFIX = "/api/v1/health"

ANALYTICS_PATH_PREFIX = "/api/v1/analytics"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its duration and echo the request id"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        path = request.url.path
        log = logger.debug if path.startswith(QUIET_PATH_PREFIX) else logger.info

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            log(
                "Request completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers; reports are recomputed per read and never cached"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith(ANALYTICS_PATH_PREFIX):
            response.headers["Cache-Control"] = "no-store"

        return response
