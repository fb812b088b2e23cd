"""
WebSocket handlers for user presence.

Example:
    {"type": "user", "id": "42",
     "data": {"action": "create", "payload": {"name": "Ann"}}}

is broadcast to every connection, the sender included, as

    {"type": "user", "id": "42",
     "data": {"action": "user_updated", "payload": {"name": "Ann"}}}

Sending "create" again for the same id replaces the stored profile and is
broadcast the same way.
"""

from portfolio.api.ws.constants import MessageType
from portfolio.api.ws.validation import validator
from portfolio.handlers.base_handler import UserHandler, crud_action_schema
from portfolio.routing import MessageDispatcher
from portfolio.services.registry import Services


def register_handlers(dispatcher: MessageDispatcher, services: Services) -> None:
    dispatcher.add_handler(
        MessageType.USER,
        UserHandler(MessageType.USER, services.users),
        json_schema=crud_action_schema,
        validator_callback=validator,
    )
