"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection for the read path
(shared across requests via ``request.app.state.db``), initialises the
schema, builds the refresh orchestrator and the snapshot reader, kicks off
the initial background refresh and starts the interval scheduler.  On
shutdown it stops the scheduler and closes the connection.

Routers
-------
    /health     — service + snapshot + refresh health
    /snapshots  — production snapshot read path
    /refresh    — manual refresh trigger and status
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docbot import __version__
from docbot.config import configure_logging, settings
from docbot.db import get_connection, init_db
from docbot.refresh import (
    RefreshOrchestrator,
    RefreshScheduler,
    SnapshotReader,
    StalenessPolicy,
    build_refresh,
)

from docbot.api.routers import health as health_router
from docbot.api.routers import refresh as refresh_router
from docbot.api.routers import snapshots as snapshots_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire the store, orchestrator and reader; trigger the initial refresh."""
    configure_logging()
    sources = settings.sources()

    conn = get_connection()
    init_db(conn)
    orchestrator = RefreshOrchestrator(build_refresh(sources))
    scheduler = RefreshScheduler(orchestrator, settings.refresh_interval)

    app.state.db = conn
    app.state.sources = sources
    app.state.orchestrator = orchestrator
    app.state.reader = SnapshotReader(
        conn, orchestrator, sources=sources, policy=StalenessPolicy.from_settings()
    )

    if settings.refresh_on_startup:
        logger.info("Triggering initial snapshot refresh in the background")
        orchestrator.trigger()
    scheduler.start()

    try:
        yield
    finally:
        scheduler.stop(timeout=5)
        app.state.orchestrator.shutdown(wait=False)
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="docbot API",
        description=(
            "Read access to crawled documentation snapshots, plus manual "
            "refresh and health reporting for the crawl pipeline."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router.router, prefix="/health", tags=["health"])
    app.include_router(snapshots_router.router, prefix="/snapshots", tags=["snapshots"])
    app.include_router(refresh_router.router, prefix="/refresh", tags=["refresh"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn docbot.api.app:app --reload
app = create_app()
