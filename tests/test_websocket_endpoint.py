"""
Tests for the WebSocket endpoint connection lifecycle.

The endpoint is driven directly with mocked WebSocket objects so that the
CONNECTING -> OPEN -> CLOSED transitions can be checked step by step.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from portfolio.api.ws.constants import ConnectionState
from portfolio.api.ws.consumers.web import Web
from portfolio.api.ws.websocket import MALFORMED
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.routing import MessageDispatcher
from tests.mocks.websocket_mocks import create_mock_websocket


@pytest.fixture
def manager():
    return ConnectionManager()


@pytest.fixture
def dispatcher(manager):
    return MessageDispatcher(manager)


def make_endpoint(manager, dispatcher):
    app = SimpleNamespace(
        state=SimpleNamespace(
            connection_manager=manager, dispatcher=dispatcher
        )
    )
    scope = {"type": "websocket", "app": app}
    return Web(scope, AsyncMock(), AsyncMock())


class TestConnectionLifecycle:
    @pytest.mark.asyncio
    async def test_connect_registers_and_sends_welcome(
        self, manager, dispatcher
    ):
        endpoint = make_endpoint(manager, dispatcher)
        ws = create_mock_websocket({"id": "A"})

        await endpoint.on_connect(ws)

        ws.accept.assert_awaited_once()
        assert endpoint.state == ConnectionState.OPEN
        assert endpoint.connection_id == "A"
        assert await manager.get_connection("A") is ws

        welcome = json.loads(ws.send_text.call_args.args[0])
        assert welcome["type"] == "info"
        assert welcome["message"]

    @pytest.mark.asyncio
    async def test_connect_without_id_generates_one(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)
        ws = create_mock_websocket()

        await endpoint.on_connect(ws)

        assert endpoint.connection_id
        assert await manager.get_connection(endpoint.connection_id) is ws

    @pytest.mark.asyncio
    async def test_welcome_can_be_disabled(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)
        ws = create_mock_websocket({"id": "A"})

        with patch(
            "portfolio.api.ws.websocket.app_settings.WS_SEND_WELCOME", False
        ):
            await endpoint.on_connect(ws)

        ws.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disconnect_deregisters_once(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)
        ws = create_mock_websocket({"id": "A"})
        await endpoint.on_connect(ws)

        with patch.object(
            manager, "disconnect", wraps=manager.disconnect
        ) as disconnect:
            await endpoint.on_disconnect(ws, 1000)
            await endpoint.on_disconnect(ws, 1000)

        disconnect.assert_awaited_once_with("A", ws)
        assert endpoint.state == ConnectionState.CLOSED
        assert await manager.get_connection("A") is None

    @pytest.mark.asyncio
    async def test_reconnect_replaces_and_closes_previous(
        self, manager, dispatcher
    ):
        first = make_endpoint(manager, dispatcher)
        second = make_endpoint(manager, dispatcher)
        old_ws = create_mock_websocket({"id": "A"})
        new_ws = create_mock_websocket({"id": "A"})

        await first.on_connect(old_ws)
        await second.on_connect(new_ws)

        old_ws.close.assert_awaited_once()
        assert await manager.get_connection("A") is new_ws

        # The old connection closing afterwards must not evict the new one
        await first.on_disconnect(old_ws, 1008)
        assert await manager.get_connection("A") is new_ws


class TestReceive:
    @pytest.mark.asyncio
    async def test_decode_valid_json(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)

        data = await endpoint.decode(
            None, {"type": "websocket.receive", "text": '{"type": "user"}'}
        )

        assert data == {"type": "user"}

    @pytest.mark.asyncio
    async def test_decode_bytes_frame(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)

        data = await endpoint.decode(
            None, {"type": "websocket.receive", "bytes": b'{"a": 1}'}
        )

        assert data == {"a": 1}

    @pytest.mark.asyncio
    async def test_decode_invalid_json_is_malformed(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)

        data = await endpoint.decode(
            None, {"type": "websocket.receive", "text": "{not json"}
        )

        assert data is MALFORMED

    @pytest.mark.asyncio
    async def test_malformed_frame_is_not_dispatched(self, manager, dispatcher):
        endpoint = make_endpoint(manager, dispatcher)
        endpoint.connection_id = "A"

        with patch.object(
            dispatcher, "handle_message", new=AsyncMock()
        ) as handle_message:
            await endpoint.on_receive(None, MALFORMED)

        handle_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_frame_is_dispatched_with_connection_id(
        self, manager, dispatcher
    ):
        endpoint = make_endpoint(manager, dispatcher)
        endpoint.connection_id = "A"
        message = {"type": "user", "id": "42", "data": {}}

        with patch.object(
            dispatcher, "handle_message", new=AsyncMock()
        ) as handle_message:
            await endpoint.on_receive(None, message)

        handle_message.assert_awaited_once_with("A", message)
