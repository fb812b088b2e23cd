from pydantic import Field

from portfolio.schemas.base import CamelModel


class ToolOutput(CamelModel):
    description: str = ""
    title: str


class Tool(CamelModel):
    description: str = ""
    name: str
    outputs: list[ToolOutput] = Field(default_factory=list)
    toollink: str = ""


class SkillInput(CamelModel):
    """Input model for creating or replacing a skill."""

    description: str = ""
    experience: int = Field(default=0, ge=0, description="Years of experience")
    image_url: str = ""
    name: str = Field(..., min_length=1, description="Skill name")
    tools: list[Tool] = Field(default_factory=list)


class SkillRead(SkillInput):
    id: str
