"""
Best-effort fan-out of one envelope to a subset of a room's members.

A selector is a predicate over a member connection. Delivery is skipped for
members whose transport is closed or whose outbox is full; nothing is queued
for later or retried.
"""

import json
import logging
from collections.abc import Callable

from roomcast.models.connection import Connection, Role
from roomcast.models.room import Room

logger = logging.getLogger(__name__)

Selector = Callable[[Connection], bool]


def everyone(conn: Connection) -> bool:
    return True


def all_except(sender: Connection) -> Selector:
    return lambda conn: conn is not sender


def role_equals(role: Role) -> Selector:
    return lambda conn: conn.role is role


def id_equals(connection_id: str) -> Selector:
    return lambda conn: conn.id == connection_id


def send(conn: Connection, payload: dict) -> bool:
    """Deliver a payload to a single connection."""
    delivered = conn.send(json.dumps(payload))
    if not delivered:
        logger.debug("Dropped %r for connection %s", payload.get("type"), conn.id)
    return delivered


def deliver(room: Room, payload: dict, selector: Selector = everyone) -> list[str]:
    """Send ``payload`` to every member of ``room`` matching ``selector``.

    Returns the ids of the members it was actually queued for.
    """
    data = json.dumps(payload)
    delivered: list[str] = []
    for conn in list(room.members.values()):
        if not selector(conn):
            continue
        if conn.send(data):
            delivered.append(conn.id)
        else:
            logger.debug("Dropped %r for connection %s in room %r", payload.get("type"), conn.id, room.id)
    return delivered
