"""``/products`` HTTP controller."""

from portfolio.api.crud import build_crud_router
from portfolio.api.ws.constants import MessageType
from portfolio.schemas.product import ProductInput, ProductRead

router = build_crud_router(
    prefix="/products",
    tag="products",
    message_type=MessageType.PRODUCT,
    service_name="products",
    input_model=ProductInput,
    read_model=ProductRead,
)
