"""
Tests for envelope routing in MessageDispatcher.
"""

from unittest.mock import AsyncMock

import pytest

from portfolio.api.ws.validation import validator
from portfolio.handlers.base_handler import crud_action_schema
from portfolio.routing import MessageDispatcher
from portfolio.schemas.envelope import (
    BroadcastEnvelope,
    Envelope,
    ReplyEnvelope,
)
from tests.mocks.websocket_mocks import create_mock_connection_manager


@pytest.fixture
def manager():
    return create_mock_connection_manager()


@pytest.fixture
def dispatcher(manager):
    return MessageDispatcher(manager)


class TestRegistration:
    def test_register_decorator(self, dispatcher):
        @dispatcher.register("greeting")
        async def greeting_handler(id, data):
            return None

        assert dispatcher.has_handler("greeting")
        assert dispatcher.handlers_registry["greeting"] is greeting_handler

    def test_register_same_handler_twice_is_noop(self, dispatcher):
        handler = AsyncMock()

        dispatcher.add_handler("greeting", handler)
        dispatcher.add_handler("greeting", handler)

        assert dispatcher.handlers_registry["greeting"] is handler

    def test_register_different_handler_raises(self, dispatcher):
        dispatcher.add_handler("greeting", AsyncMock())

        with pytest.raises(ValueError, match="greeting"):
            dispatcher.add_handler("greeting", AsyncMock())

    def test_register_multiple_types(self, dispatcher):
        handler = AsyncMock()

        dispatcher.register("a", "b")(handler)

        assert dispatcher.handlers_registry["a"] is handler
        assert dispatcher.handlers_registry["b"] is handler


class TestDispatch:
    @pytest.mark.asyncio
    async def test_exactly_one_matching_handler_runs(self, dispatcher):
        user_handler = AsyncMock(return_value=None)
        other_handler = AsyncMock(return_value=None)
        dispatcher.add_handler("user", user_handler)
        dispatcher.add_handler("organization", other_handler)

        await dispatcher.dispatch(
            Envelope(type="user", id="42", data={"action": "list"})
        )

        user_handler.assert_awaited_once_with("42", {"action": "list"})
        other_handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_type_is_dropped(self, dispatcher):
        handler = AsyncMock()
        dispatcher.add_handler("user", handler)

        result = await dispatcher.dispatch(
            Envelope(type="unknown", id="1", data={})
        )

        assert result is None
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_schema_failure_returns_error_reply(self, dispatcher):
        handler = AsyncMock()
        dispatcher.add_handler(
            "user",
            handler,
            json_schema=crud_action_schema,
            validator_callback=validator,
        )

        result = await dispatcher.dispatch(
            Envelope(type="user", id="42", data={"action": "explode"})
        )

        assert isinstance(result, ReplyEnvelope)
        assert result.data.action == "error"
        assert result.data.payload["status_code"] == 400
        assert result.data.payload["message"].startswith("Invalid data")
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_error_reply(self, dispatcher):
        dispatcher.add_handler(
            "user", AsyncMock(side_effect=KeyError("payload"))
        )

        result = await dispatcher.dispatch(
            Envelope(type="user", id="42", data={"action": "get"})
        )

        assert isinstance(result, ReplyEnvelope)
        assert result.type == "user"
        assert result.id == "42"
        assert result.data.payload["status_code"] == 500


class TestHandleMessage:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message",
        [
            {"id": "1", "data": {}},
            {"type": "user", "data": {}},
            {"type": "", "id": "1"},
            {"type": "user", "id": 42},
            ["not", "an", "object"],
            "plain string",
        ],
    )
    async def test_malformed_envelope_is_dropped(
        self, dispatcher, manager, message
    ):
        handler = AsyncMock()
        dispatcher.add_handler("user", handler)

        result = await dispatcher.handle_message("A", message)

        assert result is None
        handler.assert_not_awaited()
        manager.send_to.assert_not_awaited()
        manager.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broadcast_result_goes_to_everyone(self, dispatcher, manager):
        envelope = BroadcastEnvelope.result(
            "user", "42", "user_updated", {"name": "Ann"}
        )
        dispatcher.add_handler("user", AsyncMock(return_value=envelope))

        await dispatcher.handle_message(
            "A", {"type": "user", "id": "42", "data": {"action": "create"}}
        )

        manager.broadcast.assert_awaited_once_with(envelope)
        manager.send_to.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reply_result_goes_to_sender_only(self, dispatcher, manager):
        envelope = ReplyEnvelope.result("user", "42", "user_detail", {})
        dispatcher.add_handler("user", AsyncMock(return_value=envelope))

        await dispatcher.handle_message(
            "A", {"type": "user", "id": "42", "data": {"action": "get"}}
        )

        manager.send_to.assert_awaited_once_with("A", envelope)
        manager.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_returning_none_sends_nothing(
        self, dispatcher, manager
    ):
        dispatcher.add_handler("user", AsyncMock(return_value=None))

        await dispatcher.handle_message("A", {"type": "user", "id": "42"})

        manager.send_to.assert_not_awaited()
        manager.broadcast.assert_not_awaited()
