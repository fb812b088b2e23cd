"""
In-memory domain services for tests.

``InMemoryService`` follows the same contract as the database-backed
``CrudService`` (validation, ``NotFoundError`` on unknown ids, read models
returned) without needing PostgreSQL.
"""

from typing import Any

from portfolio.exceptions import NotFoundError
from portfolio.models.base import new_id
from portfolio.schemas.base import to_field_names
from portfolio.schemas.organization import OrganizationInput, OrganizationRead
from portfolio.schemas.product import ProductInput, ProductRead
from portfolio.schemas.skill import SkillInput, SkillRead
from portfolio.schemas.user_story import UserStoryInput, UserStoryRead
from portfolio.services.registry import Services
from portfolio.services.user_directory import UserDirectory


class InMemoryService:
    def __init__(self, input_model, read_model):
        self.input_model = input_model
        self.read_model = read_model
        self.records: dict[str, Any] = {}

    async def get_by_id(self, id: str):
        if id not in self.records:
            raise NotFoundError()
        return self.records[id]

    async def create(self, data: Any):
        input_data = (
            data
            if isinstance(data, self.input_model)
            else self.input_model.model_validate(data)
        )
        record = self.read_model(id=new_id(), **input_data.model_dump())
        self.records[record.id] = record
        return record

    async def update(self, id: str, changes: dict[str, Any]):
        current = await self.get_by_id(id)
        merged = {
            **current.model_dump(),
            **to_field_names(self.read_model, changes),
            "id": id,
        }
        record = self.read_model.model_validate(merged)
        self.records[id] = record
        return record

    async def delete(self, id: str):
        record = await self.get_by_id(id)
        del self.records[id]
        return record

    async def list(self):
        return [*self.records.values()]


def create_fake_services() -> Services:
    return Services(
        organizations=InMemoryService(OrganizationInput, OrganizationRead),
        products=InMemoryService(ProductInput, ProductRead),
        skills=InMemoryService(SkillInput, SkillRead),
        user_stories=InMemoryService(UserStoryInput, UserStoryRead),
        users=UserDirectory(),
    )
