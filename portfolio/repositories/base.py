"""
Data access for document tables.

A repository runs the queries for one table on a session owned by the
caller; the caller (a domain service) decides where transactions begin and
end, and ``Database.session`` rolls back on failure.

Example:
    ```python
    async with database.session() as session:
        repo = DocumentRepository(session, Organization)
        organizations = await repo.all()
    ```
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from portfolio.logging import logger
from portfolio.models.base import DocumentModel

T = TypeVar("T", bound=DocumentModel)


class DocumentRepository(Generic[T]):
    """
    Load, add, save and remove documents of one model.

    Type Parameters:
        T: The table model this repository manages.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    @asynccontextmanager
    async def _logged(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to {operation} {self.model.__tablename__}: {e}"
            )
            raise

    async def get(self, id: str) -> T | None:
        """Document with this id, or None."""
        async with self._logged("load from"):
            return await self.session.get(self.model, id)

    async def all(self) -> list[T]:
        """All documents, ordered by id so repeated reads are stable."""
        async with self._logged("list"):
            result = await self.session.exec(
                select(self.model).order_by(self.model.id)
            )
            return list(result.all())

    async def add(self, document: T) -> T:
        """
        Insert a document and flush it.

        Raises:
            SQLAlchemyError: If the insert fails, e.g. on a duplicate id.
        """
        async with self._logged("insert into"):
            self.session.add(document)
            await self.session.flush()
            await self.session.refresh(document)
        return document

    async def save(self, document: T) -> T:
        """Flush changes made to a document loaded through this session."""
        async with self._logged("update"):
            self.session.add(document)
            await self.session.flush()
            await self.session.refresh(document)
        return document

    async def remove(self, document: T) -> None:
        async with self._logged("delete from"):
            await self.session.delete(document)
            await self.session.flush()
