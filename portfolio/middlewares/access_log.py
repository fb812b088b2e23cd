"""
Per-request access log and Prometheus metrics for HTTP requests.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from portfolio.logging import logger
from portfolio.utils.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Log and measure every HTTP request.

    One INFO line per request: method, path, status code and duration in
    milliseconds. Tracks the following metrics:

    - http_requests_total: requests by method, endpoint and status code
    - http_request_duration_seconds: histogram of request durations
    - http_requests_in_progress: requests currently being served

    A request that raises is counted and logged with status 500.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method
        path = request.url.path
        status_code = 500

        http_requests_in_progress.labels(method=method, endpoint=path).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            http_request_duration_seconds.labels(
                method=method, endpoint=path
            ).observe(duration)
            http_requests_total.labels(
                method=method, endpoint=path, status_code=status_code
            ).inc()
            http_requests_in_progress.labels(method=method, endpoint=path).dec()

            logger.info(
                f"{method} {path} {status_code} {duration * 1000:.1f}ms",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": round(duration * 1000, 1),
                },
            )
