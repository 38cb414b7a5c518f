# backend/errbit_debugger/main.py
from __future__ import annotations

"""
FastAPI integration.

This module depends on:
- errbit_debugger.config.get_settings for configuration
- errbit_debugger.services.pipeline.ErrorPipeline for error dispatch
- errbit_debugger.services.audit for the optional audit log store

Run the bundled app with:
    uvicorn errbit_debugger.main:create_app --factory
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from errbit_debugger import __version__
from errbit_debugger.config import Settings, get_settings
from errbit_debugger.errors import BadRequestError
from errbit_debugger.services.audit import SqlAlchemyAuditStore
from errbit_debugger.services.pipeline import ErrorPipeline


def _request_pipeline(request: Request, fallback: ErrorPipeline) -> ErrorPipeline:
    return getattr(request.state, "debugger", None) or fallback


def create_app(
    pipeline: ErrorPipeline | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build a FastAPI app whose unhandled exceptions go through *pipeline*.

    Each request gets its own pipeline bound to the client address, exposed
    as ``request.state.debugger`` for route code (db_log, console_log, log).
    """
    settings = settings or get_settings()
    logging.getLogger("errbit_debugger").setLevel(settings.log_level.upper())

    if pipeline is None:
        audit_store = (
            SqlAlchemyAuditStore.from_url(settings.database_url)
            if settings.database_url
            else None
        )
        pipeline = ErrorPipeline.from_settings(settings, audit_store=audit_store)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
    )
    app.state.debugger = pipeline

    # ---- Request state ----

    @app.middleware("http")
    async def bind_request_pipeline(request: Request, call_next):
        remote_address = request.client.host if request.client else ""
        request.state.debugger = pipeline.for_request(remote_address)
        return await call_next(request)

    # ---- Error handlers ----

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
        _request_pipeline(request, pipeline).on_exception(exc, shutdown=False)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc) or "Bad request"},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        _request_pipeline(request, pipeline).on_exception(exc, shutdown=False)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal Server Error"},
        )

    # ---- Lifecycle ----

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        pipeline.on_shutdown()
        pipeline.close()

    # ---- Healthcheck ----

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app
