from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def new_id() -> str:
    """Generate a string primary key for a new document."""
    return uuid4().hex


def json_list_field() -> Any:
    """Column holding a list of strings or nested sub-documents."""
    return Field(default_factory=list, sa_column=Column(JSON, nullable=False))


class DocumentModel(SQLModel):
    """
    Base for document-shaped tables.

    Ids are opaque strings so they can be used directly as envelope ids.
    Nested lists are stored in JSON columns and validated by the
    corresponding schemas in ``portfolio.schemas``.
    """

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
