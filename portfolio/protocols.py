"""
Protocol classes for structural subtyping.

``DomainService`` is the capability interface handlers and HTTP routers
depend on. Any object implementing these coroutines can be injected,
which is how tests substitute in-memory services for the database-backed
ones.
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T", covariant=True)


@runtime_checkable
class DomainService(Protocol[T]):
    """
    CRUD operations over one entity kind.

    Lookups of unknown ids raise ``NotFoundError``; invalid input raises
    ``pydantic.ValidationError``; storage failures raise ``SQLAlchemyError``.

    Type Parameters:
        T: The record type returned by the service.
    """

    async def list(self) -> list[T]:
        """Return all records."""
        ...

    async def get_by_id(self, id: str) -> T:
        """Return one record or raise ``NotFoundError``."""
        ...

    async def create(self, data: Any) -> T:
        """Validate ``data`` and store a new record."""
        ...

    async def update(self, id: str, changes: dict[str, Any]) -> T:
        """Apply ``changes`` to an existing record."""
        ...

    async def delete(self, id: str) -> T:
        """Delete a record and return it."""
        ...
