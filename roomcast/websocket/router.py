"""
Signaling message router.

Every inbound envelope is a JSON object with a string ``type``. ``dispatch``
hands it to exactly one operation below, which validates it against the
sender's current state, mutates rooms/connections and fans out the result.

Failures are silent by protocol: malformed envelopes, unknown types, unmet
preconditions (not in a room, not a host) and unknown targets all produce no
reply. Each operation returns True only if it took effect, which is what the
tests look at.

Operations never await. Outbound frames are queued on the recipients'
outboxes, so an operation always completes before the next envelope from any
connection is looked at.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from roomcast.core import events
from roomcast.models.connection import DEFAULT_NAME, Connection, Role, clean_display_name
from roomcast.models.room import Room
from roomcast.websocket.broadcast import all_except, deliver, everyone, id_equals, role_equals, send
from roomcast.websocket.manager import RoomRegistry

logger = logging.getLogger(__name__)

Envelope = dict[str, Any]
Operation = Callable[[RoomRegistry, Connection, Envelope], bool]


def parse_envelope(raw: str | bytes) -> Envelope | None:
    """Decode one frame. Returns None if it is not a typed JSON object."""
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError, RecursionError):
        logger.warning("Invalid JSON frame: %.200r", raw)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        logger.warning("Frame is not a typed envelope: %.200r", raw)
        return None
    return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _current_room(registry: RoomRegistry, conn: Connection) -> Room | None:
    return registry.get(conn.current_room_id)


def _leave(registry: RoomRegistry, conn: Connection, room: Room) -> None:
    """Remove ``conn`` from ``room`` and tell whoever is left."""
    if conn not in room:
        return
    if registry.remove_member(room, conn):
        deliver(room, {"type": events.LEAVE_ROOM, "roomId": room.id})


def _switch_from_current(registry: RoomRegistry, conn: Connection, room_id: str) -> None:
    """Leave the sender's current room if it is not ``room_id``."""
    current = _current_room(registry, conn)
    if current is not None and current.id != room_id:
        _leave(registry, conn, current)
        conn.become_listener()


def _room_id(data: Envelope) -> str | None:
    room_id = data.get("roomId")
    if isinstance(room_id, str) and room_id:
        return room_id
    return None


def _tags(data: Envelope) -> list[str] | None:
    tags = data.get("tags")
    if not isinstance(tags, list):
        return None
    return [tag for tag in tags if isinstance(tag, str)]


def _host_target(registry: RoomRegistry, conn: Connection, data: Envelope) -> tuple[Room, Connection] | None:
    """Room and target member for a host-only operation, or None if not allowed."""
    if not conn.is_host:
        return None
    room = _current_room(registry, conn)
    if room is None:
        return None
    target = room.get_member(data.get("userId"))
    if target is None:
        return None
    return room, target


# ---------------------------------------------------------------------------
# Discovery / identity
# ---------------------------------------------------------------------------


def list_rooms(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    tag = data.get("tag")
    rooms = registry.list_rooms(tag if isinstance(tag, str) else None)
    send(conn, {"type": events.LIST_ROOMS, "rooms": rooms})
    return True


def set_name(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    conn.display_name = clean_display_name(data.get("name"))
    room = _current_room(registry, conn)
    if room is not None:
        deliver(room, {"type": events.NAME_UPDATED, "userId": conn.id, "name": conn.display_name})
    return True


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


def create_room(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    room_id = _room_id(data)
    if room_id is None:
        return False
    title = data.get("title")
    _switch_from_current(registry, conn, room_id)
    # An existing room keeps its title/tags; the caller is added as another host
    room = registry.ensure_room(room_id, title=title if isinstance(title, str) else None, tags=_tags(data))
    registry.add_member(room, conn)
    conn.become_host()
    send(conn, {"type": events.CREATE_ROOM, "roomId": room.id, "title": room.title, "tags": list(room.tags)})
    return True


def join_room(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    room_id = _room_id(data)
    if room_id is None:
        return False
    _switch_from_current(registry, conn, room_id)
    room = registry.ensure_room(room_id)
    peers = room.peer_snapshot(exclude=conn)
    registry.add_member(room, conn)
    conn.become_listener()

    send(conn, {"type": events.JOIN_ROOM, "roomId": room.id})
    send(conn, {"type": events.ROOM_PEERS, "peers": peers})
    deliver(room, {"type": events.PEER_JOINED, "userId": conn.id, "name": conn.display_name}, all_except(conn))
    return True


def leave_room(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    """Leave the current room and fall back to listener defaults.

    A ``roomId`` naming some other room is refused outright: the sender keeps
    its membership and its role/flags, so it is never a host without a room
    or a member listed in a room it does not point to.
    """
    requested = data.get("roomId")
    if requested is not None and conn.current_room_id is not None and requested != conn.current_room_id:
        return False
    room = _current_room(registry, conn)
    if room is not None:
        _leave(registry, conn, room)
    conn.become_listener()
    return True


def disconnect(registry: RoomRegistry, conn: Connection) -> None:
    """Sever all membership of a closed connection and stop tracking it."""
    room = _current_room(registry, conn)
    if room is not None:
        _leave(registry, conn, room)
    conn.become_listener()
    registry.forget(conn)


# ---------------------------------------------------------------------------
# Host / listener permissions
# ---------------------------------------------------------------------------


def raise_hand(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    room = _current_room(registry, conn)
    if room is None:
        return False
    conn.hand_raised = bool(data.get("raised", True))
    deliver(
        room,
        {"type": events.HAND_UPDATED, "userId": conn.id, "raised": conn.hand_raised},
        role_equals(Role.HOST),
    )
    return True


def allow_speak(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    found = _host_target(registry, conn, data)
    if found is None:
        return False
    room, target = found
    allowed = bool(data.get("allowed", False))
    target.can_speak = allowed
    deliver(room, {"type": events.SPEAK_PERMISSION, "allowed": allowed}, id_equals(target.id))
    deliver(
        room,
        {"type": events.SPEAK_PERMISSION_UPDATED, "userId": target.id, "allowed": allowed},
        id_equals(conn.id),
    )
    return True


def host_mute_audio(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    found = _host_target(registry, conn, data)
    if found is None:
        return False
    room, target = found
    allowed = bool(data.get("allowed", False))
    deliver(room, {"type": events.REMOTE_AUDIO_CONTROL, "allowed": allowed}, id_equals(target.id))
    # The host ack reuses the allow-speak shape; host-hide-video sends none.
    deliver(
        room,
        {"type": events.SPEAK_PERMISSION_UPDATED, "userId": target.id, "allowed": allowed},
        id_equals(conn.id),
    )
    return True


def host_hide_video(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    found = _host_target(registry, conn, data)
    if found is None:
        return False
    room, target = found
    allowed = bool(data.get("allowed", False))
    deliver(room, {"type": events.REMOTE_VIDEO_CONTROL, "allowed": allowed}, id_equals(target.id))
    return True


# ---------------------------------------------------------------------------
# Chat / WebRTC relay
# ---------------------------------------------------------------------------


def chat_message(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    room = _current_room(registry, conn)
    text = data.get("text")
    if room is None or not isinstance(text, str):
        return False
    name = data.get("name")
    if not isinstance(name, str) or not name:
        name = conn.display_name or DEFAULT_NAME
    deliver(room, {"type": events.CHAT_MESSAGE, "text": text, "name": name}, everyone)
    return True


def relay_signal(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    """Forward an opaque offer/answer/ICE payload within the sender's room."""
    room = _current_room(registry, conn)
    if room is None:
        return False
    payload = {"type": data["type"], "from": conn.id, "payload": data.get("payload")}
    to = data.get("to")
    if to is None:
        deliver(room, payload, all_except(conn))
        return True
    target = room.get_member(to)
    if target is None:
        return False
    deliver(room, payload, id_equals(target.id))
    return True


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

OPERATIONS: dict[str, Operation] = {
    events.LIST_ROOMS: list_rooms,
    events.SET_NAME: set_name,
    events.CREATE_ROOM: create_room,
    events.JOIN_ROOM: join_room,
    events.LEAVE_ROOM: leave_room,
    events.RAISE_HAND: raise_hand,
    events.ALLOW_SPEAK: allow_speak,
    events.HOST_MUTE_AUDIO: host_mute_audio,
    events.HOST_HIDE_VIDEO: host_hide_video,
    events.CHAT_MESSAGE: chat_message,
    events.OFFER: relay_signal,
    events.ANSWER: relay_signal,
    events.ICE_CANDIDATE: relay_signal,
}


def dispatch(registry: RoomRegistry, conn: Connection, data: Envelope) -> bool:
    """Apply one parsed envelope from ``conn``. Returns True if it took effect."""
    msg_type = data.get("type")
    operation = OPERATIONS.get(msg_type) if isinstance(msg_type, str) else None
    if operation is None:
        logger.debug("Ignoring unknown envelope type %r from %s", msg_type, conn.id)
        return False
    applied = operation(registry, conn, data)
    if not applied:
        logger.debug("Dropped %r from %s: precondition not met", msg_type, conn.id)
    return applied
