"""
Tuiter Backend — Request ID Middleware
========================================

What:  Tags every API call with a correlation ID, returned as X-Request-ID.
How:   The ID lands in ``request_id_var`` so the access log, the exception
       handlers in main.py and collapsed_error() can all print it, and in the
       ``request_id`` field of every error body. A 403 from a relation listing
       can therefore be matched to the log line naming the real failure.

A client-supplied X-Request-ID is kept if it is short and printable;
anything else is replaced so it cannot forge or split log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

MAX_CLIENT_ID_LENGTH = 64

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _accept_client_id(value: str) -> bool:
    return 0 < len(value) <= MAX_CLIENT_ID_LENGTH and value.isprintable()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "")
        rid = supplied if _accept_client_id(supplied) else uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
