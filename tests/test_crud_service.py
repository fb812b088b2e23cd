"""
Tests for the database-backed CrudService.

The repository is patched so no database is needed; the service's own
logic (validation, merging, not-found translation) is what is tested.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from portfolio.exceptions import NotFoundError
from portfolio.models import Skill
from portfolio.schemas.skill import SkillInput, SkillRead
from portfolio.services.base import CrudService
from tests.mocks.repository_mocks import (
    create_mock_database,
    create_mock_repository,
)


@pytest.fixture
def repo():
    return create_mock_repository()


@pytest.fixture
def service(repo):
    database, _ = create_mock_database()
    with patch("portfolio.services.base.DocumentRepository", return_value=repo):
        yield CrudService(database, Skill, SkillInput, SkillRead)


class TestCrudService:
    @pytest.mark.asyncio
    async def test_list_returns_read_models(self, service, repo):
        repo.all.return_value = [Skill(id="s1", name="Python")]

        result = await service.list()

        assert result == [SkillRead(id="s1", name="Python")]

    @pytest.mark.asyncio
    async def test_get_by_id_missing_raises_not_found(self, service, repo):
        repo.get.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await service.get_by_id("missing")

        assert exc_info.value.message == "Id not found"
        assert exc_info.value.http_status == 400

    @pytest.mark.asyncio
    async def test_create_accepts_camel_case(self, service, repo):
        result = await service.create(
            {"name": "Python", "imageUrl": "http://img", "experience": 3}
        )

        created = repo.add.call_args.args[0]
        assert isinstance(created, Skill)
        assert created.image_url == "http://img"
        assert result.image_url == "http://img"
        assert result.id == created.id

    @pytest.mark.asyncio
    async def test_create_invalid_data(self, service, repo):
        with pytest.raises(ValidationError):
            await service.create({"experience": -1})

        repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_merges_partial_changes(self, service, repo):
        stored = Skill(id="s1", name="Python", experience=2, image_url="a")
        repo.get.return_value = stored

        result = await service.update("s1", {"experience": 5})

        assert result.experience == 5
        assert result.name == "Python"
        assert result.image_url == "a"
        repo.save.assert_awaited_once_with(stored)

    @pytest.mark.asyncio
    async def test_update_accepts_snake_case_keys(self, service, repo):
        stored = Skill(id="s1", name="Python", image_url="old")
        repo.get.return_value = stored

        result = await service.update("s1", {"image_url": "new"})

        assert result.image_url == "new"
        assert stored.image_url == "new"

    @pytest.mark.asyncio
    async def test_update_accepts_camel_case_keys(self, service, repo):
        repo.get.return_value = Skill(id="s1", name="Python", image_url="old")

        result = await service.update("s1", {"imageUrl": "new"})

        assert result.image_url == "new"
        assert result.name == "Python"

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, service, repo):
        repo.get.return_value = None

        with pytest.raises(NotFoundError):
            await service.update("missing", {"name": "X"})

        repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_returns_record_before_deletion(self, service, repo):
        stored = Skill(id="s1", name="Python")
        repo.get.return_value = stored

        result = await service.delete("s1")

        assert result == SkillRead(id="s1", name="Python")
        repo.remove.assert_awaited_once_with(stored)

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, service, repo):
        with pytest.raises(NotFoundError):
            await service.delete("missing")

        repo.remove.assert_not_awaited()
