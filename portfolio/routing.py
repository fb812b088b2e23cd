import os
import pkgutil
import time
from importlib import import_module
from typing import Any

from fastapi import APIRouter
from pydantic import ValidationError

from portfolio.constants import LOG_PAYLOAD_PREVIEW_CHARS
from portfolio.logging import logger
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.schemas.envelope import (
    BroadcastEnvelope,
    Envelope,
    ReplyEnvelope,
    ResultEnvelope,
)
from portfolio.schemas.generic_typing import (
    HandlerCallableType,
    JsonSchemaType,
    ValidatorType,
)
from portfolio.utils.metrics import (
    ws_message_processing_duration_seconds,
    ws_messages_dropped_total,
)


class MessageDispatcher:
    """
    Router for WebSocket envelopes.

    Maps ``envelope.type`` to a registered handler, validates the envelope
    data against the schema registered for that type, and publishes the
    handler result through the connection manager: ``BroadcastEnvelope``
    results go to every connection, ``ReplyEnvelope`` results only to the
    connection the envelope came from.
    """

    def __init__(self, connection_manager: ConnectionManager):
        """
        Initializes the dispatcher with empty registries.

        The `handlers_registry` maps message types to handler callables.
        The `validators_registry` maps message types to a tuple of the JSON
        schema and the validator callback used for that type.
        """
        self.connection_manager = connection_manager
        self.handlers_registry: dict[str, HandlerCallableType] = {}
        self.validators_registry: dict[
            str, tuple[JsonSchemaType | None, ValidatorType | None]
        ] = {}

    def register(
        self,
        *message_types: str,
        json_schema: JsonSchemaType | None = None,
        validator_callback: ValidatorType | None = None,
    ):
        """
        Decorator to register a handler and validator for message types.

        Registering the same handler twice is a no-op; registering a
        different handler for an already registered type raises.

        Args:
            *message_types (str): One or more envelope types to handle.
            json_schema (JsonSchemaType | None): Optional JSON schema for
                ``envelope.data``.
            validator_callback (ValidatorType | None): Optional callback that
                validates ``envelope.data`` against ``json_schema``.

        Returns:
            A decorator that registers the handler and returns it unchanged.
        """

        def decorator(func: HandlerCallableType):
            for message_type in message_types:
                message_type = str(message_type)

                if message_type in self.handlers_registry:
                    if self.handlers_registry[message_type] != func:
                        raise ValueError(
                            f"Different handler already registered for type {message_type}"
                        )
                    continue

                self.handlers_registry[message_type] = func
                self.validators_registry[message_type] = (
                    json_schema,
                    validator_callback,
                )

                logger.info(
                    f"Register {_handler_name(func)} for type: {message_type}"
                )

            return func

        return decorator

    def add_handler(
        self,
        message_type: str,
        handler: HandlerCallableType,
        json_schema: JsonSchemaType | None = None,
        validator_callback: ValidatorType | None = None,
    ) -> HandlerCallableType:
        """Non-decorator form of `register` for a single type."""
        return self.register(
            message_type,
            json_schema=json_schema,
            validator_callback=validator_callback,
        )(handler)

    def has_handler(self, message_type: str) -> bool:
        """Check if a handler is registered for the given type."""
        return message_type in self.handlers_registry

    def _validate_envelope(self, envelope: Envelope) -> ReplyEnvelope | None:
        """
        Validate envelope data against the registered schema.

        Returns:
            ReplyEnvelope with error if validation fails, None if valid.
        """
        json_schema, validator_func = self.validators_registry[envelope.type]

        if validator_func is None or json_schema is None:
            return None

        # Convert Pydantic model to JSON schema if needed
        if hasattr(json_schema, "model_json_schema"):
            json_schema = json_schema.model_json_schema()

        return validator_func(envelope, json_schema)

    async def dispatch(self, envelope: Envelope) -> ResultEnvelope | None:
        """
        Run the handler for a validated envelope and return its result.

        Unknown types are logged and dropped (None). Data that fails the
        registered schema, and any exception escaping the handler, become
        an error ``ReplyEnvelope``.

        Args:
            envelope: Validated inbound envelope.

        Returns:
            The result envelope to publish, or None.
        """
        if not self.has_handler(envelope.type):
            logger.warning(
                f"No handler found for type {envelope.type}, message dropped"
            )
            ws_messages_dropped_total.labels(reason="unknown_type").inc()
            return None

        if validation_error := self._validate_envelope(envelope):
            return validation_error

        handler = self.handlers_registry[envelope.type]
        start_time = time.time()
        try:
            return await handler(envelope.id, envelope.data)
        except Exception as ex:
            logger.error(
                f"Unhandled error in handler for type {envelope.type}: {ex}",
                exc_info=True,
            )
            return ReplyEnvelope.error(
                envelope.type,
                envelope.id,
                "Internal error while handling message",
                status_code=500,
            )
        finally:
            ws_message_processing_duration_seconds.labels(
                type=envelope.type
            ).observe(time.time() - start_time)

    async def publish(
        self, connection_id: str, result: ResultEnvelope | None
    ) -> None:
        """
        Deliver a handler result.

        Args:
            connection_id: Connection the triggering envelope came from.
            result: Broadcast, reply, or None (nothing to send).
        """
        if result is None:
            return
        if isinstance(result, BroadcastEnvelope):
            await self.connection_manager.broadcast(result)
        else:
            await self.connection_manager.send_to(connection_id, result)

    async def handle_message(
        self, connection_id: str, message: Any
    ) -> ResultEnvelope | None:
        """
        Handle one decoded inbound message from a connection.

        Malformed envelopes are logged and dropped without reaching any
        handler. Nothing raised here propagates to the connection loop.

        Args:
            connection_id: Id of the connection that sent the message.
            message: Decoded JSON value of the frame.

        Returns:
            The published result envelope, or None if the message was
            dropped or the handler produced nothing.
        """
        try:
            envelope = Envelope.model_validate(message)
        except ValidationError as ex:
            logger.warning(
                f"Malformed envelope from {connection_id} dropped: "
                f"{str(message)[:LOG_PAYLOAD_PREVIEW_CHARS]} "
                f"({ex.error_count()} errors)"
            )
            ws_messages_dropped_total.labels(reason="malformed").inc()
            return None

        logger.debug(f"Received {envelope.type} envelope with id {envelope.id}")

        result = await self.dispatch(envelope)
        await self.publish(connection_id, result)
        return result


def _handler_name(func: Any) -> str:
    name = getattr(func, "__name__", type(func).__name__)
    return f"{func.__module__}.{name}"


# Track registered modules to prevent duplicate logging
_registered_http_modules: set[str] = set()
_registered_ws_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Collects and registers all API and WebSocket routers for the application.

    Iterates the `api/http` and `api/ws/consumers` packages, imports every
    module and includes its `router` in the main `APIRouter`.
    """
    main_router: APIRouter = APIRouter()

    package_dir = os.path.dirname(__file__)
    package_name = os.path.basename(package_dir)

    for _, module, _ in pkgutil.iter_modules([f"{package_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{package_name}.api.http")
        main_router.include_router(api.router)

        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    for _, module, _ in pkgutil.iter_modules(
        [f"{package_dir}/api/ws/consumers"]
    ):
        ws_consumer = import_module(
            f".{module}", package=f"{package_name}.api.ws.consumers"
        )
        main_router.include_router(ws_consumer.router)

        if module not in _registered_ws_modules:
            logger.info(f'Register "{module}" websocket consumer')
            _registered_ws_modules.add(module)

    return main_router
