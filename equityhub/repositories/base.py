"""
Generic async repository (data-access layer).

``BaseRepository[T]`` wraps an ``AsyncSession`` with the persistence port the
services rely on: get-by-id (nullable), filtered/paginated query, insert,
update, delete and an explicit transaction boundary (``commit`` /
``rollback``).

- ``create`` / ``update`` / ``delete`` commit by default.  Pass
  ``commit=False`` to stage the change and let the service commit several
  writes as one unit of work.
- ``IntegrityError`` is not caught here; each service maps it to its own
  domain error.
- ``OperationalError`` during commit rolls the session back before
  re-raising so a broken transaction never leaks into the next call.
- Every call is routed through the process-wide DB circuit breaker.
"""

import logging
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlmodel import SQLModel

from equityhub.core.resilience import db_circuit_breaker

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD repository for SQLModel entities.

    Parameters
    ----------
    model : Type[ModelType]
        The SQLModel class this repository manages.
    db : AsyncSession
        The request-scoped session (shared by every repository of a request).
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def _guarded(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        return await db_circuit_breaker.call(func, *args, **kwargs)

    # ── Transaction boundary ──

    async def commit(self) -> None:
        """Commit everything staged on the session."""

        async def _commit() -> None:
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error("OperationalError during commit (%s)", self.model.__name__)
                raise

        await self._guarded(_commit)

    async def rollback(self) -> None:
        await self.db.rollback()

    async def refresh(self, entity: ModelType) -> ModelType:
        """Reload ``entity`` from the database, discarding in-memory state."""

        async def _refresh() -> ModelType:
            await self.db.refresh(entity)
            return entity

        return await self._guarded(_refresh)

    # ── Queries ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch a single entity by primary key.  Returns ``None`` if not found."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._guarded(_get)

    async def find(
        self,
        *criteria: Any,
        order_by: Optional[Sequence[Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Return entities matching all ``criteria`` (SQLAlchemy expressions).

        ``order_by`` defaults to the primary key so repeated calls page the
        same way.
        """

        async def _find() -> List[ModelType]:
            ordering = order_by
            if ordering is None:
                ordering = list(self.model.__table__.primary_key.columns)  # type: ignore[attr-defined]
            stmt = select(self.model).where(*criteria).order_by(*ordering).offset(skip)
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._guarded(_find)

    # ── Commands ──

    async def create(self, obj_in: ModelType, *, commit: bool = True) -> ModelType:
        """
        Insert a new entity.

        With ``commit=True`` the row is committed and refreshed; otherwise it
        is only flushed so generated values and constraint errors surface
        before the caller's own commit.
        """

        async def _create() -> ModelType:
            self.db.add(obj_in)
            if not commit:
                await self.db.flush()
                return obj_in
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error("OperationalError during create for %s", self.model.__name__)
                raise
            await self.db.refresh(obj_in)
            return obj_in

        return await self._guarded(_create)

    async def update(self, entity: ModelType, *, commit: bool = True) -> ModelType:
        """Persist attribute changes the caller made on ``entity``."""

        async def _update() -> ModelType:
            merged = await self.db.merge(entity)
            if not commit:
                await self.db.flush()
                return merged
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error("OperationalError during update for %s", self.model.__name__)
                raise
            await self.db.refresh(merged)
            return merged

        return await self._guarded(_update)

    async def delete(self, id: Any, *, commit: bool = True) -> bool:
        """
        Delete an entity by primary key.

        Returns ``True`` if a row was deleted, ``False`` if none existed.
        """

        async def _delete() -> bool:
            entity = await self.db.get(self.model, id)
            if entity is None:
                return False
            await self.db.delete(entity)
            if not commit:
                await self.db.flush()
                return True
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error(
                    "OperationalError during delete for %s id=%s", self.model.__name__, id
                )
                raise
            return True

        return await self._guarded(_delete)
