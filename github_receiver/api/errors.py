"""Unified error handling — ReceiverError → status code with an empty body."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from github_receiver.alerts import (
    FormatError,
    MethodError,
    ReceiverError,
    TrackerError,
    TransportError,
)

log = structlog.get_logger("github_receiver.api")

_STATUS_MAP: dict[type[ReceiverError], int] = {
    MethodError: 405,
    FormatError: 400,
    TransportError: 500,
    TrackerError: 500,
}


def status_for(exc: ReceiverError) -> int:
    """Status code of the closest mapped class in the exception's MRO."""
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


async def _receiver_error_handler(request: Request, exc: ReceiverError) -> Response:
    status = status_for(exc)
    log.warning(
        "request.rejected",
        method=request.method,
        path=request.url.path,
        status_code=status,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    # Details stay in the log, never in the response.
    return Response(status_code=status)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Methods outside the route's list are rejected by the router before the
    # receiver handler runs; answer them like any other wrong method.
    if exc.status_code == 405:
        log.warning(
            "request.rejected",
            method=request.method,
            path=request.url.path,
            status_code=405,
            error_type="MethodError",
        )
        return Response(status_code=405)
    return await http_exception_handler(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(ReceiverError, _receiver_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
