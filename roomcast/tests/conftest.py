"""
Pytest fixtures shared across all test modules.

Router and registry tests drive real Connection objects and read what was
queued on their outboxes; WebSocket tests go through the FastAPI TestClient.
"""

import json

import pytest
from fastapi.testclient import TestClient

from roomcast.main import app
from roomcast.models.connection import Connection
from roomcast.websocket.manager import RoomRegistry


@pytest.fixture()
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture()
def client():
    # Entering the client runs the lifespan, which creates a fresh registry
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def drain(conn: Connection) -> list[dict]:
    """Pop and decode every frame queued for a connection."""
    frames = []
    while not conn.outbox.empty():
        frames.append(json.loads(conn.outbox.get_nowait()))
    return frames


def assert_invariants(registry: RoomRegistry, *conns: Connection) -> None:
    """Membership agrees in both directions and no room is empty."""
    for room_id in [s["roomId"] for s in registry.list_rooms()]:
        room = registry.get(room_id)
        assert len(room) >= 1
        for member in room.members.values():
            assert member.current_room_id == room.id
    for conn in conns:
        holding = [s["roomId"] for s in registry.list_rooms() if conn in registry.get(s["roomId"])]
        if conn.current_room_id is None:
            assert holding == []
        else:
            assert holding == [conn.current_room_id]
