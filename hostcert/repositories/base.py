"""Generic async repository over short-lived sessions, with pagination."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostcert.core.exceptions import PersistenceUnavailable
from hostcert.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Every call opens its own session from the factory and commits before
    returning, so one failed write never rolls back another. Integrity errors
    are re-raised untouched for subclasses to translate; every other
    SQLAlchemy error becomes :class:`PersistenceUnavailable`.
    """

    model: type[ModelT]

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise
            except SQLAlchemyError as exc:
                await session.rollback()
                raise PersistenceUnavailable(
                    f"{self.model.__name__} store is unavailable: {exc.__class__.__name__}"
                ) from exc

    def _base_query(self):
        return select(self.model)

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        async with self._session() as session:
            result = await session.execute(
                self._base_query().where(self.model.id == entity_id)
            )
            return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._apply_filters(self._base_query(), filters)

        async with self._session() as session:
            count_q = select(func.count()).select_from(q.subquery())
            total = (await session.execute(count_q)).scalar_one()

            col = getattr(self.model, order_by, None)
            if col is not None:
                q = q.order_by(col.desc() if order == "desc" else col.asc())
            q = q.offset(offset).limit(limit)

            items = (await session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        async with self._session() as session:
            session.add(instance)
            await session.flush()  # populate defaults
            await session.refresh(instance)
        return instance

    async def hard_delete(self, entity_id: str) -> bool:
        async with self._session() as session:
            result = await session.execute(
                delete(self.model).where(self.model.id == entity_id)
            )
        return result.rowcount > 0
