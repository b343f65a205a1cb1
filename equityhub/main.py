"""
EquityHub Cap Table API — application entry-point.

Initialises logging, registers middleware, exception handlers and routers,
and manages the application lifecycle (table creation on startup, pool
disposal on shutdown).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy import text
from sqlmodel import SQLModel

from equityhub.api.router import api_router
from equityhub.core.config import settings
from equityhub.core.exceptions import add_exception_handlers
from equityhub.core.logging import setup_logging
from equityhub.core.resilience import db_circuit_breaker, retry_with_backoff
from equityhub.db.session import AsyncSessionLocal, engine
from equityhub.middleware import RequestIDMiddleware, RequestTimingMiddleware

setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@retry_with_backoff(max_retries=settings.DB_CONNECT_RETRIES, base_delay=2.0, max_delay=30.0)
async def _create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: create missing tables, retrying while the database comes up.
    If it never does, the app still starts in degraded mode and ``/health``
    reports ``database: false``.

    Shutdown: dispose of the connection pool.
    """
    # Table classes must be imported before create_all sees them.
    import equityhub.models  # noqa: F401

    try:
        await _create_tables()
        logger.info("Database tables ready")
    except Exception as exc:
        logger.error(
            "Could not initialise the database after %d retries; starting in "
            "DEGRADED mode. Last error: %s",
            settings.DB_CONNECT_RETRIES,
            exc,
        )

    yield

    logger.info("Shutting down, disposing connection pool")
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    description=(
        "Multi-tenant cap-table API: companies, shareholders, share accounts, "
        "financing rounds and option-pool allocation."
    ),
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Outermost first: last added runs first.
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness / readiness probe.

    Runs ``SELECT 1`` against the database and reports the DB circuit
    breaker's state alongside.
    """
    db_healthy = True
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Health check database probe failed: %s", exc)
        db_healthy = False

    return {
        "status": "ok" if db_healthy else "degraded",
        "version": VERSION,
        "database": db_healthy,
        "circuit_breaker": db_circuit_breaker.get_status(),
    }
