"""
HTTP observability middleware.

CorrelationMiddleware binds a correlation ID per request and echoes it in
the X-Correlation-ID response header. RequestLoggingMiddleware writes one
access line per request; server errors log at ERROR, client errors at
WARNING, and health probes at DEBUG to keep load balancer noise out.

Dependencies: starlette, training_erp.observability.correlation
System role: Request/response observability injection
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from training_erp.observability.correlation import (
    clear_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
QUIET_PATH_SUFFIXES = ("/health", "/health/db")


def _access_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path.endswith(QUIET_PATH_SUFFIXES):
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured access log record per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "%s %s failed",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.log(
            _access_level(path, response.status_code),
            "%s %s -> %s",
            method,
            path,
            response.status_code,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Bind the request correlation ID and return it to the caller."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
