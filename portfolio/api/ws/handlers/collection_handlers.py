"""
WebSocket handlers for the persisted collections.

Request:
    {"type": "organization", "id": "<entity id or correlation token>",
     "data": {"action": "list|get|create|update|delete", "payload": {...}}}

``id`` is the entity id for get/update/delete. For list and create it is
a correlation token chosen by the client and echoed back in the result.

Results:
    create/update -> broadcast {"action": "organization_updated", "payload": record}
    delete        -> broadcast {"action": "organization_deleted", "payload": record}
    get           -> reply     {"action": "organization_detail", "payload": record}
    list          -> reply     {"action": "organization_list", "payload": [records]}
"""

from portfolio.api.ws.constants import MessageType
from portfolio.api.ws.validation import validator
from portfolio.handlers.base_handler import CrudHandler, crud_action_schema
from portfolio.routing import MessageDispatcher
from portfolio.services.registry import Services


def register_handlers(dispatcher: MessageDispatcher, services: Services) -> None:
    collections = {
        MessageType.ORGANIZATION: services.organizations,
        MessageType.PRODUCT: services.products,
        MessageType.SKILL: services.skills,
        MessageType.USER_STORY: services.user_stories,
    }
    for message_type, service in collections.items():
        dispatcher.add_handler(
            message_type,
            CrudHandler(message_type, service),
            json_schema=crud_action_schema,
            validator_callback=validator,
        )
