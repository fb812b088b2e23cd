from typing import Any

from portfolio.models.base import DocumentModel, json_list_field


class Product(DocumentModel, table=True):
    __tablename__ = "products"

    blueprint: str = ""
    description: str = ""
    images: list[str] = json_list_field()
    name: str
    skills: list[str] = json_list_field()
    stores: list[dict[str, Any]] = json_list_field()
    user_story: list[str] = json_list_field()
