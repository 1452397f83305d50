"""
Per-participant connection state.

Identity and role are client-asserted: nothing here is authenticated. The
role is a capability flag the router checks before host-only operations,
so any future auth layer only has to decide who may become a host.
"""

import asyncio
import enum
import logging

from roomcast.config import settings

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Anonymous"


class Role(str, enum.Enum):
    HOST = "host"
    LISTENER = "listener"


def clean_display_name(name: object) -> str:
    """Trim and cap a client-supplied name, falling back to the default."""
    if not isinstance(name, str):
        return DEFAULT_NAME
    name = name.strip()[: settings.MAX_NAME_LENGTH]
    return name or DEFAULT_NAME


class Connection:
    """One participant's signaling session.

    Outbound frames go through a bounded queue that a transport task drains,
    so ``send`` never suspends the caller.
    """

    def __init__(self, connection_id: str, outbox_size: int | None = None) -> None:
        self.id = connection_id
        self.role = Role.LISTENER
        self.display_name = DEFAULT_NAME
        self.hand_raised = False
        self.can_speak = False
        self.current_room_id: str | None = None
        self.is_open = True
        self.outbox: asyncio.Queue[str] = asyncio.Queue(
            maxsize=settings.OUTBOX_MAX_SIZE if outbox_size is None else outbox_size
        )

    def __repr__(self) -> str:
        return f"<Connection {self.id} role={self.role.value} room={self.current_room_id!r}>"

    @property
    def is_host(self) -> bool:
        return self.role is Role.HOST

    def become_host(self) -> None:
        self.role = Role.HOST
        self.can_speak = True
        self.hand_raised = False

    def become_listener(self) -> None:
        self.role = Role.LISTENER
        self.can_speak = False
        self.hand_raised = False

    def send(self, frame: str) -> bool:
        """Queue a serialized frame. Returns False if it was dropped."""
        if not self.is_open:
            return False
        try:
            self.outbox.put_nowait(frame)
        except asyncio.QueueFull:
            logger.debug("Outbox full for connection %s, frame dropped", self.id)
            return False
        return True

    def close(self) -> None:
        self.is_open = False
