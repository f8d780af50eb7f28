"""
Tuiter Backend — Error Response Helpers
=========================================

What:  Builds the JSON error envelope used by the global exception handlers
       and by routes that answer every failure with one fixed status code.
"""

import logging

from fastapi.responses import JSONResponse

from tuiter.exceptions import TuiterError
from tuiter.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def collapsed_error(exc: TuiterError, status_code: int, operation: str) -> JSONResponse:
    """
    Answer ``exc`` with the fixed ``status_code`` an endpoint has always used.

    The real failure kind is logged, so a 403 caused by a database outage
    can still be told apart from a missing session.
    """
    logger.warning(
        "[%s] %s failed with %s: %s | Context: %s",
        request_id_var.get(""),
        operation,
        type(exc).__name__,
        exc.message,
        exc.context,
    )
    return error_response(
        status_code=status_code,
        error="forbidden" if status_code == 403 else "not_found",
        message=exc.message,
    )
