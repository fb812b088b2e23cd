from typing import Any

from portfolio.models.base import DocumentModel, json_list_field


class UserStory(DocumentModel, table=True):
    __tablename__ = "user_stories"

    problem: str = ""
    solution: str = ""
    user_flow: str = ""
    user_reviews: list[dict[str, Any]] = json_list_field()
