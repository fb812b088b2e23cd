from pydantic import Field

from portfolio.schemas.base import CamelModel


class Store(CamelModel):
    name: str
    url: str = ""


class ProductInput(CamelModel):
    """Input model for creating or replacing a product."""

    blueprint: str = ""
    description: str = ""
    images: list[str] = Field(default_factory=list)
    name: str = Field(..., min_length=1, description="Product name")
    skills: list[str] = Field(default_factory=list)
    stores: list[Store] = Field(default_factory=list)
    user_story: list[str] = Field(default_factory=list)


class ProductRead(ProductInput):
    id: str
