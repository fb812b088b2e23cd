from portfolio.models.organization import Organization
from portfolio.models.product import Product
from portfolio.models.skill import Skill
from portfolio.models.user_story import UserStory

__all__ = ["Organization", "Product", "Skill", "UserStory"]
