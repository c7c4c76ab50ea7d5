"""WebSocket gateway tests against the real broadcast router."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from presence_chat.app import create_app
from tests.conftest import FakeMessageLog, frame

ALICE = {"id": "u1", "name": "Alice"}


@pytest.fixture
def message_log():
    return FakeMessageLog()


@pytest.fixture
def client(message_log):
    app = create_app()
    app.state.broadcast_router.message_log = message_log
    with TestClient(app) as client:
        yield client


def _ready(ws, user_id="observer"):
    """Round-trip a ping so the connection is known to be registered."""
    ws.send_text(frame("ping", user_id=user_id, name="Observer"))
    assert ws.receive_json()["type"] == "ping"


def test_chat_round_trip(client, message_log):
    with client.websocket_connect("/ws") as ws:
        ws.send_text(frame("chat", text="hello"))
        event = ws.receive_json()

    assert event["type"] == "chat"
    assert event["message"]["text"] == "hello"
    assert event["message"]["userName"] == "Alice"
    assert message_log.messages[0].id == event["message"]["id"]


def test_two_tabs_one_join(client):
    with client.websocket_connect("/ws") as tab_a:
        tab_a.send_text(frame("join"))
        assert tab_a.receive_json() == {"type": "join", "user": ALICE}

        with client.websocket_connect("/ws") as tab_b:
            tab_b.send_text(frame("join"))
            tab_b.send_text(frame("chat", text="sync"))
            assert tab_b.receive_json()["type"] == "chat"
            assert tab_a.receive_json()["type"] == "chat"

            presence = client.get("/api/v1/presence").json()
            assert presence["online"][0]["id"] == "u1"
            assert presence["online"][0]["connections"] == 2

        # closing one tab keeps the user online
        _ready(tab_a)


def test_abrupt_close_broadcasts_leave(client):
    with client.websocket_connect("/ws") as observer:
        _ready(observer)
        with client.websocket_connect("/ws") as tab:
            tab.send_text(frame("join"))
            assert observer.receive_json() == {"type": "join", "user": ALICE}

        assert observer.receive_json() == {"type": "leave", "user": ALICE}


def test_malformed_frames_keep_connection_open(client, message_log):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        ws.send_text('{"no": "type"}')
        ws.send_text(frame("chat", text="   "))
        _ready(ws)

    assert message_log.messages == []


def test_failed_persistence_is_not_broadcast(client, message_log):
    message_log.fail = True
    with client.websocket_connect("/ws") as ws:
        ws.send_text(frame("chat", text="lost"))
        _ready(ws)
