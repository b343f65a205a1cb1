"""
Database engine and session management.

One async engine per process; one ``AsyncSession`` per request, handed out by
the :func:`get_db` dependency.  A session is the unit of work: repositories
stage changes on it and services decide when to commit.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from equityhub.core.config import settings


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """
    Turn on FK enforcement (and ``ON DELETE CASCADE``) for every SQLite connection.

    The listener is attached to the *sync* engine because aiosqlite wraps a
    sync connection; the async engine never fires ``connect``.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def make_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attribute access after commit must not trigger
    # an implicit (sync) lazy load.
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


if settings.USE_SQLITE:
    # StaticPool: every checkout shares the single in-memory database.
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
else:
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )

AsyncSessionLocal = make_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session, closed afterwards."""
    async with AsyncSessionLocal() as session:
        yield session
