"""
Factory for the HTTP CRUD controllers of persisted collections.

Each collection exposes the same five routes. Mutations made over HTTP
are pushed to WebSocket clients with the same envelopes the WebSocket
handlers broadcast, so both protocols keep clients in sync.

Example:
    ```python
    router = build_crud_router(
        prefix="/skills",
        tag="skills",
        message_type=MessageType.SKILL,
        service_name="skills",
        input_model=SkillInput,
        read_model=SkillRead,
    )
    ```
"""

from typing import Any, Type

from fastapi import APIRouter, Body, status
from pydantic import BaseModel

from portfolio.constants import RECORD_DELETED_MESSAGE
from portfolio.dependencies import ConnectionManagerDep, ServicesDep
from portfolio.handlers.base_handler import CrudHandler
from portfolio.logging import logger
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.schemas.base import DeleteInput
from portfolio.schemas.envelope import BroadcastEnvelope


class DeleteResponse(BaseModel):
    message: str
    data: dict[str, Any]


async def notify_clients(
    manager: ConnectionManager,
    message_type: str,
    action: str,
    record: Any,
) -> None:
    """Broadcast a ``<type>_<action>`` envelope for an HTTP mutation."""
    payload = CrudHandler.serialize(record)
    envelope = BroadcastEnvelope.result(
        str(message_type),
        payload["id"],
        f"{message_type}_{action}",
        payload,
    )
    delivered = await manager.broadcast(envelope)
    logger.debug(
        f"{message_type}_{action} for {payload['id']} sent to {delivered} clients"
    )


def build_crud_router(
    prefix: str,
    tag: str,
    message_type: str,
    service_name: str,
    input_model: Type[BaseModel],
    read_model: Type[BaseModel],
) -> APIRouter:
    """
    Build the router for one collection.

    Args:
        prefix: URL prefix, e.g. ``/organizations``.
        tag: OpenAPI tag.
        message_type: Envelope type used for WebSocket notifications.
        service_name: Attribute of ``Services`` holding the domain service.
        input_model: Body schema for create.
        read_model: Response schema.

    Returns:
        Router with list, get, create, update and delete routes.
    """
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get(
        "",
        response_model=list[read_model],
        summary=f"List {tag}",
    )
    async def list_records(services: ServicesDep):
        return await getattr(services, service_name).list()

    @router.get(
        "/{id}",
        response_model=read_model,
        summary=f"Get one of {tag} by id",
        responses={400: {"description": "Id not found"}},
    )
    async def get_record(id: str, services: ServicesDep):
        return await getattr(services, service_name).get_by_id(id)

    @router.post(
        "/create",
        response_model=read_model,
        status_code=status.HTTP_200_OK,
        summary=f"Create one of {tag}",
    )
    async def create_record(
        data: input_model,  # type: ignore[valid-type]
        services: ServicesDep,
        manager: ConnectionManagerDep,
    ):
        record = await getattr(services, service_name).create(data)
        await notify_clients(manager, message_type, "updated", record)
        return record

    @router.put(
        "/{id}",
        response_model=read_model,
        summary=f"Update one of {tag}",
        responses={400: {"description": "Id not found"}},
    )
    async def update_record(
        id: str,
        services: ServicesDep,
        manager: ConnectionManagerDep,
        changes: dict[str, Any] = Body(...),
    ):
        record = await getattr(services, service_name).update(id, changes)
        await notify_clients(manager, message_type, "updated", record)
        return record

    @router.post(
        "/delete",
        response_model=DeleteResponse,
        summary=f"Delete one of {tag}",
        responses={400: {"description": "Id not found"}},
    )
    async def delete_record(
        body: DeleteInput,
        services: ServicesDep,
        manager: ConnectionManagerDep,
    ):
        record = await getattr(services, service_name).delete(body.id)
        await notify_clients(manager, message_type, "deleted", record)
        return {
            "message": RECORD_DELETED_MESSAGE,
            "data": CrudHandler.serialize(record),
        }

    return router
