"""
End-to-end WebSocket tests through the ASGI application.

Clients connect with ``/ws?id=<connection id>`` and exchange JSON
envelopes. Every connection first receives the welcome info message.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def connect(client, connection_id):
    ws = client.websocket_connect(f"/ws?id={connection_id}")
    return ws


class TestWebSocketFlow:
    def test_welcome_message(self, client):
        with connect(client, "A") as ws:
            welcome = ws.receive_json()

        assert welcome["type"] == "info"
        assert isinstance(welcome["message"], str)

    def test_user_create_is_broadcast_to_all(self, client):
        with connect(client, "A") as ws_a, connect(client, "B") as ws_b:
            ws_a.receive_json()
            ws_b.receive_json()

            ws_a.send_json(
                {
                    "type": "user",
                    "id": "42",
                    "data": {"action": "create", "payload": {"name": "Ann"}},
                }
            )

            expected = {
                "type": "user",
                "id": "42",
                "data": {"action": "user_updated", "payload": {"name": "Ann"}},
            }
            assert ws_a.receive_json() == expected
            assert ws_b.receive_json() == expected

    def test_read_reply_goes_to_sender_only(self, client):
        with connect(client, "A") as ws_a, connect(client, "B") as ws_b:
            ws_a.receive_json()
            ws_b.receive_json()

            ws_a.send_json(
                {"type": "organization", "id": "t1", "data": {"action": "list"}}
            )
            reply = ws_a.receive_json()
            assert reply["data"] == {"action": "organization_list", "payload": []}

            # B's next message is the reply to its own request
            ws_b.send_json(
                {"type": "skill", "id": "t2", "data": {"action": "list"}}
            )
            assert ws_b.receive_json()["data"]["action"] == "skill_list"

    def test_domain_error_is_reported_to_sender(self, client):
        with connect(client, "A") as ws:
            ws.receive_json()

            ws.send_json(
                {"type": "product", "id": "missing", "data": {"action": "get"}}
            )

            assert ws.receive_json() == {
                "type": "product",
                "id": "missing",
                "data": {
                    "action": "error",
                    "payload": {"message": "Id not found", "status_code": 400},
                },
            }

    def test_malformed_frames_keep_connection_open(self, client):
        with connect(client, "A") as ws:
            ws.receive_json()

            ws.send_text("{definitely not json")
            ws.send_json({"id": "no-type"})
            ws.send_json({"type": "unknown", "id": "1", "data": {}})
            ws.send_json(
                {"type": "organization", "id": "t1", "data": {"action": "list"}}
            )

            assert ws.receive_json()["data"]["action"] == "organization_list"

    def test_schema_violation_is_error_reply(self, client):
        with connect(client, "A") as ws:
            ws.receive_json()

            ws.send_json(
                {"type": "skill", "id": "t1", "data": {"action": "fly"}}
            )

            reply = ws.receive_json()
            assert reply["data"]["action"] == "error"
            assert reply["data"]["payload"]["status_code"] == 400

    def test_http_mutation_is_pushed_to_websocket_clients(self, client):
        with connect(client, "A") as ws:
            ws.receive_json()

            response = client.post("/skills/create", json={"name": "Python"})
            record = response.json()

            assert ws.receive_json() == {
                "type": "skill",
                "id": record["id"],
                "data": {"action": "skill_updated", "payload": record},
            }

    def test_same_id_replaces_previous_connection(self, client):
        with connect(client, "A") as first:
            first.receive_json()

            with connect(client, "A") as second:
                second.receive_json()

                with pytest.raises(WebSocketDisconnect) as exc_info:
                    first.receive_json()
                assert exc_info.value.code == 1008

                second.send_json(
                    {"type": "user", "id": "1", "data": {"action": "list"}}
                )
                assert second.receive_json()["data"]["action"] == "user_list"
