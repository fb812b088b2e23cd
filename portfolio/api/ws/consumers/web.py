from typing import Any

from fastapi import APIRouter

from portfolio.api.ws.websocket import EnvelopeWebSocketEndpoint
from portfolio.settings import app_settings
from portfolio.utils.metrics import ws_messages_received_total

router = APIRouter()


@router.websocket_route(app_settings.WS_PATH)
class Web(EnvelopeWebSocketEndpoint):
    """
    Public WebSocket endpoint for portfolio clients.

    Every text frame is expected to carry one JSON envelope
    ``{"type", "id", "data"}``. Envelopes are routed by type through the
    application's ``MessageDispatcher``; results are either broadcast to
    all connected clients or replied to this connection only.
    """

    async def on_receive(self, websocket, data: Any):
        """
        Count the frame and pass it to the dispatcher.

        Args:
            websocket: The WebSocket connection instance
            data: Decoded JSON value of the frame, or ``MALFORMED``
        """
        ws_messages_received_total.inc()
        await super().on_receive(websocket, data)
