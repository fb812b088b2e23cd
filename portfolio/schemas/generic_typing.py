from collections.abc import Awaitable
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Optional,
    Protocol,
    Union,
)

from portfolio.schemas.envelope import Envelope

if TYPE_CHECKING:
    from portfolio.schemas.envelope import ResultEnvelope, ReplyEnvelope


class PydanticModel(Protocol):
    """Protocol for Pydantic models with model_json_schema method."""

    def model_json_schema(self) -> dict[str, Any]: ...


# Type definitions
JsonSchemaType = (
    dict[str, Union[str, int, float, bool, list[Any], "JsonSchemaType"]]
    | type[PydanticModel]
)
ValidatorType = Callable[[Envelope, JsonSchemaType], Optional["ReplyEnvelope"]]
HandlerCallableType = Callable[
    [str, Any], Awaitable[Optional["ResultEnvelope"]]
]
