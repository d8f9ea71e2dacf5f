"""FastAPI application factory for ClipLink."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cliplink import __version__
from cliplink.api.routes.channels import router as channels_router
from cliplink.api.routes.clipboard import router as clipboard_router
from cliplink.api.routes.devices import router as devices_router
from cliplink.api.routes.stats import router as stats_router
from cliplink.api.routes.sync import router as sync_router
from cliplink.config import ClipLinkConfig, ConfigManager
from cliplink.db import create_engine, create_schema, create_session_factory
from cliplink.errors import ClipLinkError
from cliplink.sync.facade import SyncFacade

logger = logging.getLogger(__name__)


def _log_json(level: int, event: str, **fields: object) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, "%s", json.dumps(payload, ensure_ascii=False, sort_keys=True))


def _resolve_log_level(config: ClipLinkConfig) -> int:
    return int(getattr(logging, config.logging.level, logging.INFO))


def create_app(config: ClipLinkConfig | None = None) -> FastAPI:
    """Create the app. Storage is opened in the lifespan and closed on shutdown."""
    cfg = config or ConfigManager.instance().get()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = create_engine(cfg.database.url or None, echo=cfg.database.echo)
        if cfg.database.create_schema:
            await create_schema(engine)
        app.state.engine = engine
        app.state.facade = SyncFacade.from_session_factory(
            create_session_factory(engine),
            max_channel_id_length=cfg.sync.max_channel_id_length,
            max_favorites=cfg.sync.max_favorites_limit,
            seed_welcome_item=cfg.sync.seed_welcome_item,
            welcome_text=cfg.sync.welcome_text,
        )
        logger.info("ClipLink API started (database: %s)", engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(
        title="ClipLink API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = cfg
    app.state.log_level = _resolve_log_level(cfg)

    @app.exception_handler(ClipLinkError)
    async def handle_cliplink_error(request: Request, exc: ClipLinkError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.middleware("http")
    async def request_log_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled API exception: %s",
                json.dumps({"event": "api_request_error", "method": method, "path": path}, ensure_ascii=False),
            )
            raise
        _log_json(
            app.state.log_level,
            "api_request",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000.0, 3),
        )
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(channels_router)
    app.include_router(clipboard_router)
    app.include_router(devices_router)
    app.include_router(stats_router)
    app.include_router(sync_router)

    return app
