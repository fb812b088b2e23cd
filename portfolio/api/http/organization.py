"""``/organizations`` HTTP controller."""

from portfolio.api.crud import build_crud_router
from portfolio.api.ws.constants import MessageType
from portfolio.schemas.organization import OrganizationInput, OrganizationRead

router = build_crud_router(
    prefix="/organizations",
    tag="organizations",
    message_type=MessageType.ORGANIZATION,
    service_name="organizations",
    input_model=OrganizationInput,
    read_model=OrganizationRead,
)
