"""
API Error Responses
===================
Maps collector failures onto JSON error bodies.

Bodies always carry ``ok: false``, a user-facing ``error`` and a stable
``code``. Unexpected exceptions are logged with their details and answered
with a generic message.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from ..errors import CollectorError, RateLimited

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def create_error_response(exc: CollectorError) -> JSONResponse:
    content = {
        "ok": False,
        "error": exc.message,
        "code": exc.code,
    }
    headers = None
    if isinstance(exc, RateLimited):
        content["remainingTime"] = exc.remaining_seconds
        headers = {"Retry-After": str(exc.remaining_seconds)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def collector_error_handler(request: Request, exc: CollectorError) -> JSONResponse:
    level = "error" if exc.status_code >= 500 else "info"
    getattr(logger, level)(
        "request_rejected",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
    )
    return create_error_response(exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": INTERNAL_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CollectorError, collector_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
