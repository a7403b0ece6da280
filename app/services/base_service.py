"""Base service class with common database operations."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, TypeVar

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(Generic[ModelType]):
    """Base service with common staging and transaction helpers.

    Writes are only flushed; ``transaction()`` is the one place that commits.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType], log=logger):
        self.db = db
        self.model = model
        self.log = log

    async def count(self, *criteria: Any) -> int:
        """Count entities matching all given criteria."""
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar_one()

    async def add(self, obj: Base) -> Base:
        """Stage a new entity and flush so it gets its identity."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit on success, roll everything back on any error."""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
