"""TimeCapsule API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TimeCapsuleError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and expiration sweeper started/stopped by the lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Sweeper owned by the lifespan: one task per process, stopped before the
      engine is disposed so no sweep runs against a closed pool
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timecapsule import __version__
from timecapsule.api.error_handlers import register_error_handlers
from timecapsule.api.routes import capsules, health
from timecapsule.config import get_settings
from timecapsule.infrastructure.clock import SystemClock
from timecapsule.infrastructure.database import init_db
from timecapsule.infrastructure.observability import setup_logging
from timecapsule.services.expiration_sweeper import ExpirationSweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    sweeper = ExpirationSweeper(
        manager.session,
        SystemClock(),
        interval_seconds=settings.sweep_interval_seconds,
        retention_window=settings.retention_window,
    )
    if settings.sweeper_enabled:
        sweeper.start()
    app.state.sweeper = sweeper
    logger.info("TimeCapsule API started")
    yield
    logger.info("TimeCapsule API shutting down")
    await sweeper.stop()
    await manager.dispose()


app = FastAPI(
    title="TimeCapsule API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(capsules.router)

register_error_handlers(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("timecapsule.main:app", host="0.0.0.0", port=8000)
