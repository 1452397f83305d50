import logging
import secrets

from roomcast.models.connection import Connection
from roomcast.models.room import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live room and connection for one server process.

    Rooms are created on first reference and dropped the moment their last
    member leaves. Membership changes go through ``add_member`` and
    ``remove_member`` so ``conn.current_room_id`` and ``room.members``
    always agree.

    All methods are synchronous; the event loop runs each inbound envelope to
    completion, so no locking is needed around snapshot-then-mutate sequences.
    """

    def __init__(self) -> None:
        # room_id -> Room, in creation order
        self._rooms: dict[str, Room] = {}
        # connection_id -> Connection
        self._connections: dict[str, Connection] = {}

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def connect(self, outbox_size: int | None = None) -> Connection:
        """Create and track a new connection with a unique id."""
        connection_id = secrets.token_hex(4)
        while connection_id in self._connections:
            connection_id = secrets.token_hex(4)
        conn = Connection(connection_id, outbox_size=outbox_size)
        self._connections[connection_id] = conn
        logger.info("Connection %s opened", connection_id)
        return conn

    def forget(self, conn: Connection) -> None:
        """Stop tracking a connection. Membership must already be severed."""
        conn.close()
        self._connections.pop(conn.id, None)
        logger.info("Connection %s closed", conn.id)

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def ensure_room(self, room_id: str, title: str | None = None, tags: list[str] | None = None) -> Room:
        """Return the room, creating it if absent.

        ``title`` and ``tags`` only apply to a newly created room.
        """
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id, title=title, tags=tags)
            self._rooms[room_id] = room
            logger.info("Room %r created", room_id)
        return room

    def get(self, room_id: str | None) -> Room | None:
        if room_id is None:
            return None
        return self._rooms.get(room_id)

    def remove(self, room_id: str) -> None:
        if self._rooms.pop(room_id, None) is not None:
            logger.info("Room %r removed", room_id)

    def list_rooms(self, tag: str | None = None) -> list[dict]:
        """Summaries of all rooms, optionally filtered by a case-insensitive tag."""
        return [room.summary() for room in self._rooms.values() if not tag or room.has_tag(tag)]

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_member(self, room: Room, conn: Connection) -> None:
        """Put ``conn`` in ``room``. The caller must have left any other room first."""
        if conn.current_room_id not in (None, room.id):
            raise ValueError(f"connection {conn.id} is still in room {conn.current_room_id!r}")
        room.members[conn.id] = conn
        conn.current_room_id = room.id

    def remove_member(self, room: Room, conn: Connection) -> bool:
        """Take ``conn`` out of ``room``, deleting the room if it is now empty.

        Returns True if the room still has members afterwards.
        """
        room.members.pop(conn.id, None)
        if conn.current_room_id == room.id:
            conn.current_room_id = None
        if not room.members:
            self.remove(room.id)
            return False
        return True
