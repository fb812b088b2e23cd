from typing import Any

from portfolio.models.base import DocumentModel, json_list_field


class Skill(DocumentModel, table=True):
    """
    SQLModel representing a skill.

    ``tools`` holds nested tool documents, each with its own list of
    outputs.
    """

    __tablename__ = "skills"

    description: str = ""
    experience: int = 0
    image_url: str = ""
    name: str
    tools: list[dict[str, Any]] = json_list_field()
