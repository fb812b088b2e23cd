"""``/user-stories`` HTTP controller."""

from portfolio.api.crud import build_crud_router
from portfolio.api.ws.constants import MessageType
from portfolio.schemas.user_story import UserStoryInput, UserStoryRead

router = build_crud_router(
    prefix="/user-stories",
    tag="user-stories",
    message_type=MessageType.USER_STORY,
    service_name="user_stories",
    input_model=UserStoryInput,
    read_model=UserStoryRead,
)
