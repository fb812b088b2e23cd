from pydantic import Field

from portfolio.schemas.base import CamelModel


class UserReview(CamelModel):
    review: str
    user_name: str = ""


class UserStoryInput(CamelModel):
    """Input model for creating or replacing a user story."""

    problem: str = Field(..., min_length=1)
    solution: str = ""
    user_flow: str = ""
    user_reviews: list[UserReview] = Field(default_factory=list)


class UserStoryRead(UserStoryInput):
    id: str
