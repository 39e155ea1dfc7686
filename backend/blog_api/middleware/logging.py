"""
Blog API Backend — Request Logging Middleware
===============================================

What:  One access-log line per HTTP request.
How:   Measures time around call_next() and logs method, path, status,
       duration and request id. Probe paths (/health) are not logged.
Who:   Installed by create_app(); runs inside RequestIDMiddleware so the
       request id is already set.

Log line:
    2024-01-15T12:00:00 [INFO] blog_api.access: POST /posts 201 12.3ms [a1b2c3d4] from 127.0.0.1

The same values are attached as `extra` fields for structured handlers.
Request bodies are never logged: post content is user text.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blog_api.middleware.request_id import request_id_var

logger = logging.getLogger("blog_api.access")

# Why: load balancers poll these every few seconds; logging them buries real traffic
UNLOGGED_PATHS = frozenset({"/health"})


def level_for_status(status_code: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes one `blog_api.access` record per request, after the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        # Why perf_counter: monotonic, unaffected by wall-clock adjustments
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            # request.client is None under ASGITransport
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            level_for_status(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response
