"""``/skills`` HTTP controller."""

from portfolio.api.crud import build_crud_router
from portfolio.api.ws.constants import MessageType
from portfolio.schemas.skill import SkillInput, SkillRead

router = build_crud_router(
    prefix="/skills",
    tag="skills",
    message_type=MessageType.SKILL,
    service_name="skills",
    input_model=SkillInput,
    read_model=SkillRead,
)
