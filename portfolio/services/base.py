"""
Database-backed domain service.

A ``CrudService`` implements the ``DomainService`` protocol for one table:
it validates input with the entity's input schema, runs the repository
inside a session from the injected ``Database``, and returns read models
so that HTTP and WebSocket callers serialize records the same way.

Example:
    ```python
    organizations = CrudService(
        database, Organization, OrganizationInput, OrganizationRead
    )
    created = await organizations.create({"name": "Acme"})
    await organizations.delete(created.id)
    ```
"""

from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlmodel import SQLModel

from portfolio.exceptions import NotFoundError
from portfolio.logging import logger
from portfolio.repositories.base import DocumentRepository
from portfolio.schemas.base import to_field_names
from portfolio.storage.db import Database

TModel = TypeVar("TModel", bound=SQLModel)
TInput = TypeVar("TInput", bound=BaseModel)
TRead = TypeVar("TRead", bound=BaseModel)


class CrudService(Generic[TModel, TInput, TRead]):
    """
    CRUD operations for one entity kind.

    Type Parameters:
        TModel: Table model.
        TInput: Schema validating create/update input.
        TRead: Schema returned to callers.
    """

    def __init__(
        self,
        database: Database,
        model: Type[TModel],
        input_model: Type[TInput],
        read_model: Type[TRead],
    ):
        self.database = database
        self.model = model
        self.input_model = input_model
        self.read_model = read_model

    @property
    def name(self) -> str:
        return self.model.__name__

    def _to_read(self, record: TModel) -> TRead:
        return self.read_model.model_validate(record)

    def _to_input(self, data: Any) -> TInput:
        if isinstance(data, self.input_model):
            return data
        return self.input_model.model_validate(data)

    async def get_by_id(self, id: str) -> TRead:
        """
        Get one record.

        Raises:
            NotFoundError: If no record has this id.
        """
        async with self.database.session() as session:
            record = await DocumentRepository(session, self.model).get(id)
        if record is None:
            raise NotFoundError()
        return self._to_read(record)

    async def create(self, data: Any) -> TRead:
        """
        Validate and store a new record.

        Args:
            data: Input schema instance or a mapping accepted by it.

        Raises:
            pydantic.ValidationError: If ``data`` does not match the schema.
        """
        input_data = self._to_input(data)

        async with self.database.session() as session:
            async with session.begin():
                record = self.model(**input_data.model_dump())
                record = await DocumentRepository(session, self.model).add(
                    record
                )

        logger.info(f"Created {self.name} {record.id}")
        return self._to_read(record)

    async def update(self, id: str, changes: dict[str, Any]) -> TRead:
        """
        Apply changes to an existing record.

        ``changes`` may be partial and may use either key spelling; it is
        merged over the stored record and the result is validated against
        the input schema.

        Raises:
            NotFoundError: If no record has this id.
            pydantic.ValidationError: If the merged record is invalid.
        """
        async with self.database.session() as session:
            async with session.begin():
                repo = DocumentRepository(session, self.model)
                record = await repo.get(id)
                if record is None:
                    raise NotFoundError()

                current = self._to_read(record).model_dump(exclude={"id"})
                merged = self._to_input(
                    {**current, **to_field_names(self.input_model, changes)}
                )

                for key, value in merged.model_dump().items():
                    setattr(record, key, value)
                record = await repo.save(record)

        logger.info(f"Updated {self.name} {id}")
        return self._to_read(record)

    async def delete(self, id: str) -> TRead:
        """
        Delete a record and return it as it was before deletion.

        Raises:
            NotFoundError: If no record has this id.
        """
        async with self.database.session() as session:
            async with session.begin():
                repo = DocumentRepository(session, self.model)
                record = await repo.get(id)
                if record is None:
                    raise NotFoundError()
                deleted = self._to_read(record)
                await repo.remove(record)

        logger.info(f"Deleted {self.name} {id}")
        return deleted

    async def list(self) -> list[TRead]:
        """Return all records."""
        async with self.database.session() as session:
            records = await DocumentRepository(session, self.model).all()
        return [self._to_read(record) for record in records]
