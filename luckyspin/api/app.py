# luckyspin/api/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from luckyspin.api.routes import router as api_router
from luckyspin.config.settings import Settings
from luckyspin.database.session import Database
from luckyspin.errors import MalformedRequest, SpinError
from luckyspin.services.allocation import SpinService
from luckyspin.services.analytics import EventRecorder
from luckyspin.services.notify import StaffNotifier
from luckyspin.services.rate_limit import RateLimiter

log = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    *,
    db: Database | None = None,
    events: EventRecorder | None = None,
    spins: SpinService | None = None,
) -> FastAPI:
    """
    Build the HTTP app. Collaborators can be injected (tests); otherwise they
    are built from settings. The lifespan creates tables and disposes the
    engine on shutdown.
    """
    db = db or Database(settings.database_url)
    events = events or EventRecorder(db, StaffNotifier.from_settings(settings))
    spins = spins or SpinService(
        db,
        limiter=RateLimiter(window_hours=settings.window_hours, ip_limit=settings.ip_spin_limit),
        events=events,
        miss_ratio=settings.miss_ratio,
        max_attempts=settings.max_attempts,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await db.init_models()
        log.info("DB initialized")
        try:
            yield
        finally:
            try:
                await events.close()
            except Exception:
                log.exception("Failed to flush analytics")
            try:
                await db.close()
            except Exception:
                log.exception("Failed to close DB")

    app = FastAPI(title="luckyspin", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.events = events
    app.state.spins = spins

    @app.exception_handler(SpinError)
    async def _spin_error(_request: Request, exc: SpinError) -> JSONResponse:
        if exc.status_code >= 500:
            log.warning("%s: %s", exc.__class__.__name__, exc.message)
        return _render(exc)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        log.debug("Rejected body on %s %s: %s", request.method, request.url.path, exc.errors())
        return _render(MalformedRequest())

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _render(SpinError())

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"ok": True}

    app.include_router(api_router)
    return app


def _render(exc: SpinError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )
