"""
Tuiter Backend — Access Log Middleware
========================================

What:  One ``tuiter.access`` line per API call: method, path, status,
       duration, request ID and the session viewer (user id or "anonymous").
How:   Runs inside SessionMiddleware, so the viewer is read from the signed
       session profile without touching the database. 5xx logs at ERROR and
       4xx at WARNING; the legacy 403/404 answers of the relation routes show
       up here next to the WARNING collapsed_error() wrote for the same ID.

Never logged: request bodies (passwords), the session cookie itself.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tuiter.middleware.request_id import request_id_var
from tuiter.services.auth import session_user_id

logger = logging.getLogger("tuiter.access")

# Load balancer probes
QUIET_PATHS = {"/health"}


def _viewer(request: Request) -> str:
    if "session" not in request.scope:
        return "anonymous"
    user_id = session_user_id(request)
    return str(user_id) if user_id is not None else "anonymous"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        viewer = _viewer(request)

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            level,
            "%s %s %d %.1fms [%s] viewer=%s",
            request.method,
            request.url.path,
            status,
            elapsed_ms,
            rid,
            viewer,
            extra={
                "request_id": rid,
                "viewer": viewer,
                "status": status,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
