"""Explicit container of the domain services used by handlers and routers."""

from dataclasses import dataclass

from portfolio.models import Organization, Product, Skill, UserStory
from portfolio.protocols import DomainService
from portfolio.schemas.organization import OrganizationInput, OrganizationRead
from portfolio.schemas.product import ProductInput, ProductRead
from portfolio.schemas.skill import SkillInput, SkillRead
from portfolio.schemas.user_story import UserStoryInput, UserStoryRead
from portfolio.services.base import CrudService
from portfolio.services.user_directory import UserDirectory
from portfolio.storage.db import Database


@dataclass
class Services:
    """
    Domain services, one per entity kind.

    Built once at startup and stored on ``app.state.services``. Handlers
    and HTTP routers look services up here instead of importing module
    level singletons.
    """

    organizations: DomainService
    products: DomainService
    skills: DomainService
    user_stories: DomainService
    users: UserDirectory


def build_services(database: Database) -> Services:
    """
    Wire database-backed services to one ``Database`` handle.

    Args:
        database: Handle created at process start.

    Returns:
        Services ready for injection.
    """
    return Services(
        organizations=CrudService(
            database, Organization, OrganizationInput, OrganizationRead
        ),
        products=CrudService(database, Product, ProductInput, ProductRead),
        skills=CrudService(database, Skill, SkillInput, SkillRead),
        user_stories=CrudService(
            database, UserStory, UserStoryInput, UserStoryRead
        ),
        users=UserDirectory(),
    )
