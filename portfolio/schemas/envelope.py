"""
Wire models for messages exchanged over WebSocket connections.

Inbound messages are ``Envelope`` instances. Outbound messages are either
``InfoMessage`` (server notices), ``BroadcastEnvelope`` (delivered to every
connection) or ``ReplyEnvelope`` (delivered to the originating connection
only). Broadcast and reply share the ``{type, id, data: {action, payload}}``
shape and differ only in how they are routed.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from portfolio.constants import ERROR_ACTION, INFO_MESSAGE_TYPE

NonEmptyStr = Annotated[str, Field(min_length=1, strict=True)]


class Envelope(BaseModel):  # type: ignore[misc]
    """
    Inbound message envelope.

    Attributes:
        type: Selects the handler (e.g. "user", "organization").
        id: Routing or entity identifier, meaning depends on ``type``.
        data: Payload handed to the handler, validated per type.
    """

    type: NonEmptyStr = Field(frozen=True)
    id: NonEmptyStr = Field(frozen=True)
    data: Any = None


class ActionData(BaseModel):  # type: ignore[misc]
    """Payload shape of CRUD and result envelopes."""

    action: str
    payload: Any = None


class ErrorPayload(BaseModel):  # type: ignore[misc]
    message: str
    status_code: int


class ResultEnvelope(BaseModel):  # type: ignore[misc]
    type: str = Field(frozen=True)
    id: str = Field(frozen=True)
    data: ActionData

    @classmethod
    def result(
        cls, message_type: str, id: str, action: str, payload: Any = None
    ) -> "ResultEnvelope":
        return cls(
            type=message_type,
            id=id,
            data=ActionData(action=action, payload=payload),
        )


class BroadcastEnvelope(ResultEnvelope):
    """Result delivered to every registered connection."""


class ReplyEnvelope(ResultEnvelope):
    """Result delivered only to the connection that sent the request."""

    @classmethod
    def error(
        cls, message_type: str, id: str, message: str, status_code: int = 400
    ) -> "ReplyEnvelope":
        """
        Build a structured error result.

        Args:
            message_type: Type of the envelope that failed.
            id: Id of the envelope that failed.
            message: Human-readable error message.
            status_code: HTTP-equivalent status of the failure.

        Returns:
            ReplyEnvelope with ``action`` set to "error".
        """
        return cls(
            type=message_type,
            id=id,
            data=ActionData(
                action=ERROR_ACTION,
                payload=ErrorPayload(
                    message=message, status_code=status_code
                ).model_dump(),
            ),
        )


class InfoMessage(BaseModel):  # type: ignore[misc]
    """Server notice, e.g. the welcome message sent on connect."""

    type: Literal["info"] = INFO_MESSAGE_TYPE
    message: str


OutboundMessage = BaseModel | dict[str, Any]


def serialize_message(message: OutboundMessage) -> str:
    """
    Serialize an outbound message to JSON text.

    Args:
        message: Pydantic model or plain dict.

    Returns:
        JSON string ready to be written to a channel.
    """
    if isinstance(message, BaseModel):
        return message.model_dump_json()
    return json.dumps(message, default=str)
