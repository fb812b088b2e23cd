import asyncio

from starlette.websockets import WebSocket, WebSocketDisconnect

from portfolio.connection_registry import ConnectionRegistry
from portfolio.logging import logger
from portfolio.schemas.envelope import OutboundMessage, serialize_message
from portfolio.utils.metrics import (
    ws_messages_sent_total,
    ws_send_failures_total,
)


class ConnectionManager:
    """
    Sender for active WebSocket connections.

    Wraps a ``ConnectionRegistry`` keyed by connection id and delivers
    outbound messages to one connection (``send_to``) or to every
    registered connection (``broadcast``). Delivery is fire-and-forget:
    failures are logged and counted, never raised to the caller.
    """

    def __init__(
        self, registry: ConnectionRegistry[WebSocket] | None = None
    ) -> None:
        self.registry: ConnectionRegistry[WebSocket] = (
            registry if registry is not None else ConnectionRegistry()
        )

    async def connect(
        self, connection_id: str, websocket: WebSocket
    ) -> WebSocket | None:
        """
        Registers a WebSocket connection under ``connection_id``.

        Args:
            connection_id: Unique identifier for this connection.
            websocket: The WebSocket connection to be added.

        Returns:
            The connection previously registered under the same id, which
            the caller is responsible for closing, or None.
        """
        return await self.registry.register(connection_id, websocket)

    async def disconnect(
        self, connection_id: str, websocket: WebSocket | None = None
    ) -> bool:
        """
        Removes a WebSocket connection by id. Unknown ids are a no-op.

        Args:
            connection_id: The id of the connection to remove.
            websocket: Only remove if the id still maps to this connection.

        Returns:
            True if a connection was removed.
        """
        return await self.registry.deregister(connection_id, websocket)

    async def get_connection(self, connection_id: str) -> WebSocket | None:
        """Get WebSocket connection by id, or None if not registered."""
        return await self.registry.lookup(connection_id)

    @property
    def active_connections(self) -> int:
        return len(self.registry)

    async def send_to(
        self, connection_id: str, message: OutboundMessage
    ) -> bool:
        """
        Sends a message to a single connection.

        Args:
            connection_id: Target connection id.
            message: Message to serialize and send.

        Returns:
            True if the message was written, False if no connection exists
            for the id or the write failed.
        """
        websocket = await self.registry.lookup(connection_id)
        if websocket is None:
            logger.warning(f"No connection registered for id {connection_id}")
            ws_send_failures_total.labels(reason="not_found").inc()
            return False

        return await self._send_text(
            connection_id, websocket, serialize_message(message)
        )

    async def broadcast(self, message: OutboundMessage) -> int:
        """
        Broadcasts message to all active connections concurrently.

        The message is serialized once. Recipients are taken from a snapshot
        of the registry, so connections added while the broadcast is in
        flight may not receive it. A failed write to one connection does
        not affect the others; the failing connection is deregistered.

        Args:
            message: The message to be broadcast.

        Returns:
            Number of connections the message was delivered to.
        """
        connections_snapshot = await self.registry.all()
        if not connections_snapshot:
            return 0

        text = serialize_message(message)
        results = await asyncio.gather(
            *[
                self._send_text(key, conn, text, drop_on_failure=True)
                for key, conn in connections_snapshot
            ],
            return_exceptions=True,
        )
        return sum(1 for result in results if result is True)

    async def _send_text(
        self,
        connection_id: str,
        websocket: WebSocket,
        text: str,
        drop_on_failure: bool = False,
    ) -> bool:
        """
        Writes serialized text to one connection, isolating failures.

        Args:
            connection_id: The id of the connection.
            websocket: The WebSocket connection to send to.
            text: Serialized message.
            drop_on_failure: Deregister the connection if the write fails.
        """
        try:
            await websocket.send_text(text)
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(
                f"Failed to send to connection {id(websocket)} "
                f"(key: {connection_id}): {e}"
            )
        except Exception as e:
            logger.warning(
                f"Unexpected error sending to connection {id(websocket)} "
                f"(key: {connection_id}): {e}"
            )
        else:
            ws_messages_sent_total.inc()
            return True

        ws_send_failures_total.labels(reason="write_error").inc()
        if drop_on_failure:
            await self.registry.deregister(connection_id, websocket)
        return False
