"""Receiver HTTP API — FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from github_receiver import __version__
from github_receiver.api.deps import close_tracker, init_handler
from github_receiver.api.errors import register_error_handlers
from github_receiver.api.routers import issues, receiver
from github_receiver.core.config import Settings
from github_receiver.core.logging import setup_logging


def create_app(settings: Settings | None = None, *, log_level: str | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    *settings* defaults to :meth:`Settings.from_env`; the tracker is created
    at startup and released at shutdown.
    """
    setup_logging(level=log_level)
    resolved = settings or Settings.from_env()

    @asynccontextmanager
    async def _lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        init_handler(resolved)
        yield
        await close_tracker()

    app = FastAPI(
        title="GitHub Receiver",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(issues.router, tags=["issues"])
    app.include_router(receiver.router, prefix="/v1", tags=["receiver"])

    return app
