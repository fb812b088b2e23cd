from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from portfolio.api.ws.constants import CrudAction
from portfolio.exceptions import AppException
from portfolio.logging import logger
from portfolio.protocols import DomainService
from portfolio.schemas.envelope import (
    BroadcastEnvelope,
    ReplyEnvelope,
    ResultEnvelope,
)
from portfolio.schemas.generic_typing import JsonSchemaType

crud_action_schema: JsonSchemaType = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "action": {
            "type": "string",
            "enum": [action.value for action in CrudAction],
        },
        "payload": {},
    },
    "required": ["action"],
    "additionalProperties": False,
}


class CrudHandler:
    """
    Envelope handler for one entity type backed by a ``DomainService``.

    Called with ``(id, data)`` where ``data`` is ``{action, payload}``
    (already checked against ``crud_action_schema`` by the dispatcher).

    Mutations return a ``BroadcastEnvelope`` with action
    ``<type>_updated`` or ``<type>_deleted``; reads return a
    ``ReplyEnvelope`` with ``<type>_list`` or ``<type>_detail``. Domain
    failures are returned as error replies instead of raised.
    """

    def __init__(self, message_type: str, service: DomainService):
        self.message_type = str(message_type)
        self.service = service

    async def __call__(self, id: str, data: dict[str, Any]) -> ResultEnvelope:
        action = CrudAction(data["action"])
        payload = data.get("payload")
        method = getattr(self, f"on_{action.value}")

        try:
            return await method(id, payload)
        except AppException as ex:
            logger.warning(
                f"AppException in {self.message_type}.{action.value}: {ex.message}",
                extra={"exception_type": type(ex).__name__, "envelope_id": id},
            )
            return self.error(id, ex.message, ex.http_status)
        except PydanticValidationError as ex:
            logger.warning(
                f"Invalid payload for {self.message_type}.{action.value}: {ex}"
            )
            return self.error(
                id, f"Invalid {self.message_type} data", status_code=400
            )
        except ValueError as ex:
            return self.error(id, str(ex), status_code=400)
        except SQLAlchemyError as ex:
            logger.error(
                f"Database error in {self.message_type}.{action.value}: {ex}",
                exc_info=True,
            )
            return self.error(id, "Database error occurred", status_code=500)

    @staticmethod
    def serialize(record: Any) -> Any:
        """Convert a service result into a JSON-compatible payload."""
        if isinstance(record, BaseModel):
            return record.model_dump(mode="json", by_alias=True)
        if isinstance(record, list):
            return [CrudHandler.serialize(item) for item in record]
        return record

    def error(self, id: str, message: str, status_code: int) -> ReplyEnvelope:
        return ReplyEnvelope.error(self.message_type, id, message, status_code)

    def reply(self, id: str, action: str, payload: Any) -> ReplyEnvelope:
        return ReplyEnvelope.result(
            self.message_type,
            id,
            f"{self.message_type}_{action}",
            self.serialize(payload),
        )

    def broadcast(self, id: str, action: str, payload: Any) -> BroadcastEnvelope:
        return BroadcastEnvelope.result(
            self.message_type,
            id,
            f"{self.message_type}_{action}",
            self.serialize(payload),
        )

    async def on_list(self, id: str, payload: Any) -> ResultEnvelope:
        return self.reply(id, "list", await self.service.list())

    async def on_get(self, id: str, payload: Any) -> ResultEnvelope:
        return self.reply(id, "detail", await self.service.get_by_id(id))

    async def on_create(self, id: str, payload: Any) -> ResultEnvelope:
        return self.broadcast(id, "updated", await self.service.create(payload))

    async def on_update(self, id: str, payload: Any) -> ResultEnvelope:
        if not isinstance(payload, dict):
            raise ValueError("Update payload must be an object")
        return self.broadcast(
            id, "updated", await self.service.update(id, payload)
        )

    async def on_delete(self, id: str, payload: Any) -> ResultEnvelope:
        return self.broadcast(id, "deleted", await self.service.delete(id))


class UserHandler(CrudHandler):
    """
    Handler for the ``user`` type.

    The envelope id is always the user id, including for ``create``.
    """

    async def on_create(self, id: str, payload: Any) -> ResultEnvelope:
        return self.broadcast(
            id, "updated", await self.service.create(payload, id=id)
        )
