from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.adapters.kv_store import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from src.api.counters import router as counters_router
from src.api.health import router as health_router
from src.db.base import build_engine, build_session_maker, create_schema
from src.utils.background import DetachedTasks
from src.utils.config import Settings, get_settings


logger = structlog.get_logger(__name__)


def configure_logging() -> None:
    """Configure structlog for JSON logs with reasonable defaults."""
    timestamper = structlog.processors.TimeStamper(fmt="iso")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Ensure stdlib logs are forwarded in JSON too
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO)


async def build_store(settings: Settings) -> tuple[KeyValueStore, AsyncEngine | None]:
    """Construct the process-wide counter store from settings.

    Returns the store and the engine that must be disposed on shutdown, if any.
    """
    if settings.store_backend == "memory":
        return InMemoryKeyValueStore(), None

    engine = build_engine(settings.database_url)
    if settings.store_auto_create:
        await create_schema(engine)
    return SqlKeyValueStore(build_session_maker(engine)), engine


async def plain_text_http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    # Counter routes only answer GET; other methods are routing misses
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not Found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app(store: KeyValueStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the application.

    An explicit store is used as-is; otherwise one is built from settings when
    the lifespan starts and torn down when it ends.
    """
    configure_logging()
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine: AsyncEngine | None = None
        if app.state.store is None:
            app.state.store, engine = await build_store(settings)
        logger.info(
            "app_started",
            app_env=settings.app_env,
            version=settings.app_version,
            store_backend=type(app.state.store).__name__,
        )
        try:
            yield
        finally:
            abandoned = await app.state.detached_tasks.drain(settings.detached_drain_timeout_s)
            if engine is not None:
                await engine.dispose()
            logger.info("app_stopped", abandoned_writes=abandoned)

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.store = store
    app.state.detached_tasks = DetachedTasks()
    app.add_exception_handler(StarletteHTTPException, plain_text_http_error)  # type: ignore[arg-type]
    app.include_router(health_router)
    app.include_router(counters_router)
    return app


app = create_app()
