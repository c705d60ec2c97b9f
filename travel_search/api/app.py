from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from travel_search.config import Settings, get_settings
from travel_search.store.database import (
    SessionLocal,
    engine as default_engine,
    init_db,
    make_engine,
    make_session_factory,
)

from .errors import register_exception_handlers
from .routers.health import router as health_router
from .routers.search import router as search_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    init_db(app.state.engine)
    logger.info(
        "Travel search API ready (env=%s, prefix=%s)",
        settings.app_env,
        settings.api_prefix or "/",
    )
    yield
    if app.state.engine is not default_engine:
        app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    ``API_BASE_PATH`` (e.g. ``/travel``) is used as the ASGI root_path for
    deployments behind a reverse proxy under a subpath; routes themselves live
    under ``API_PREFIX`` (default ``/api/v1``). Sessions are opened on an engine for
    ``settings.database_url``; the module engine is shared when the URL is the
    configured one.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="Travel Search API",
        version="1.0.0",
        description="Keyword search and autocomplete over travel experiences",
        lifespan=lifespan,
        root_path=settings.api_base_path,
    )
    app.state.settings = settings
    if settings.database_url == get_settings().database_url:
        app.state.engine = default_engine
        app.state.session_factory = SessionLocal
    else:
        app.state.engine = make_engine(settings.database_url)
        app.state.session_factory = make_session_factory(app.state.engine)

    # CORS: the single-page client is served from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    app.include_router(search_router, prefix=settings.api_prefix)
    app.include_router(health_router, prefix=settings.api_prefix)
    return app


app = create_app()
