import json
import uuid
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketDisconnect

from portfolio.api.ws.constants import ConnectionState
from portfolio.constants import LOG_PAYLOAD_PREVIEW_CHARS
from portfolio.logging import clear_log_context, logger, set_log_context
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.routing import MessageDispatcher
from portfolio.schemas.envelope import InfoMessage
from portfolio.settings import app_settings
from portfolio.utils.metrics import (
    ws_connections_active,
    ws_connections_total,
    ws_messages_dropped_total,
)

# Sentinel returned by decode() for frames that are not valid JSON
MALFORMED = object()


class EnvelopeWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint that registers connections and routes envelopes.

    Tracks the per-connection state machine ``CONNECTING -> OPEN -> CLOSED``:
    the connection is registered with the connection manager when it
    becomes OPEN and deregistered exactly once when it becomes CLOSED.
    The connection manager and dispatcher are taken from ``app.state``.
    """

    encoding = None  # frames are decoded in decode()

    state: ConnectionState = ConnectionState.CONNECTING
    connection_id: str | None = None

    @property
    def connection_manager(self) -> ConnectionManager:
        return self.scope["app"].state.connection_manager

    @property
    def dispatcher(self) -> MessageDispatcher:
        return self.scope["app"].state.dispatcher

    async def dispatch(self) -> None:
        """
        Manage the WebSocket connection lifecycle.

        Receives frames until the client disconnects, passing each decoded
        frame to ``on_receive``. ``on_disconnect`` always runs, with the
        close code reported by the client, or 1011 if the loop failed.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        await self.on_connect(websocket)

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except WebSocketDisconnect as exc:
            close_code = exc.code
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(self, websocket: WebSocket, message: dict[str, Any]) -> Any:
        """
        Decode an incoming frame as JSON.

        Returns:
            The decoded JSON value, or ``MALFORMED`` if the frame is not
            valid JSON text.
        """
        text = message.get("text")
        if text is None and message.get("bytes") is not None:
            try:
                text = message["bytes"].decode("utf-8")
            except UnicodeDecodeError:
                text = None

        if text is None:
            return MALFORMED

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning(
                f"Received non-JSON frame: {text[:LOG_PAYLOAD_PREVIEW_CHARS]}"
            )
            return MALFORMED

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accept the connection, register it and send the welcome message.

        The connection id is taken from the ``id`` query parameter or
        generated. If another connection was registered under the same id
        it is replaced and closed.
        """
        self.state = ConnectionState.CONNECTING
        await websocket.accept()

        self.connection_id = websocket.query_params.get("id") or str(
            uuid.uuid4()
        )
        set_log_context(connection_id=self.connection_id)

        previous = await self.connection_manager.connect(
            self.connection_id, websocket
        )
        if previous is not None and previous is not websocket:
            logger.warning(
                f"Connection id {self.connection_id} re-registered, closing previous connection"
            )
            ws_connections_total.labels(status="replaced").inc()
            await self._close_quietly(previous)

        self.state = ConnectionState.OPEN
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.debug(f"Client connected to websocket ({self.connection_id})")

        if app_settings.WS_SEND_WELCOME:
            await self.connection_manager.send_to(
                self.connection_id,
                InfoMessage(message=app_settings.WS_WELCOME_MESSAGE),
            )

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Deregister the connection. Repeated notifications are no-ops.
        """
        if self.state == ConnectionState.CLOSED:
            return

        was_open = self.state == ConnectionState.OPEN
        self.state = ConnectionState.CLOSED

        if self.connection_id is not None:
            await self.connection_manager.disconnect(
                self.connection_id, websocket
            )
        if was_open:
            ws_connections_active.dec()

        logger.debug(
            f"Client {self.connection_id} disconnected with code {close_code}"
        )
        clear_log_context()

    async def on_receive(self, websocket: WebSocket, data: Any) -> None:
        if data is MALFORMED:
            ws_messages_dropped_total.labels(reason="malformed").inc()
            return
        await self.dispatcher.handle_message(self.connection_id, data)

    @staticmethod
    async def _close_quietly(websocket: WebSocket) -> None:
        try:
            await websocket.close(
                code=status.WS_1008_POLICY_VIOLATION,
                reason="Connection id registered by another client",
            )
        except (RuntimeError, ConnectionError) as e:
            logger.debug(f"Previous connection already closed: {e}")
