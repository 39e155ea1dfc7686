"""
Blog API Backend — Request ID Middleware
==========================================

What:  Assigns an id to each incoming request and returns it in X-Request-ID.
How:   Uses the client's X-Request-ID header when it is non-blank, otherwise
       a short random id; stores it in a ContextVar and on request.state.
Who:   Read by the access log middleware and every exception handler, which
       copies it into the `request_id` field of error bodies.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Why ContextVar: concurrent requests share one thread, each coroutine needs its own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """An 8-character hex id; short enough to read in a log line."""
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds the request id for the duration of one request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER, "").strip() or new_request_id()
        # Not reset afterwards: the catch-all 500 handler runs outside this
        # middleware and still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
