from pydantic import Field

from portfolio.schemas.base import CamelModel


class Job(CamelModel):
    current: bool = False
    end_date: str = ""
    position: str
    responsibility: str = ""
    start_date: str = ""


class OrganizationInput(CamelModel):
    """Input model for creating or replacing an organization."""

    description: str = ""
    jobs: list[Job] = Field(default_factory=list)
    location: str = ""
    name: str = Field(..., min_length=1, description="Organization name")
    products: list[str] = Field(default_factory=list)
    size: int = Field(default=0, ge=0)
    website: str = ""


class OrganizationRead(OrganizationInput):
    id: str
