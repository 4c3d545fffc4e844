"""Middleware that logs every request with its status and latency."""

from __future__ import annotations

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def _outcome(status_code: int) -> Optional[str]:
    """Return the log message for a status, or None when it is not logged."""
    if 200 <= status_code < 300:
        return "request completed successfully"
    if 400 <= status_code < 500:
        return "client error"
    if 500 <= status_code < 600:
        return "server error"
    return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, URI, HTTP version, status and latency of each request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        method = request.method
        uri = str(request.url)
        version = request.scope.get("http_version", "1.1")

        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)

        message = _outcome(response.status_code)
        if message is not None:
            logger.info(
                "%s %s HTTP/%s: %s (status=%d, latency_ms=%d)",
                method,
                uri,
                version,
                message,
                response.status_code,
                latency_ms,
                extra={
                    "method": method,
                    "uri": uri,
                    "http_version": version,
                    "status": response.status_code,
                    "latency_ms": latency_ms,
                    "outcome": message,
                },
            )
        return response