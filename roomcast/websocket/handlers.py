"""Signaling WebSocket handler: the transport side of a connection.

Inbound frames are parsed and routed one at a time. Outbound frames are
drained from the connection's outbox by a separate pump task, so a slow
peer only ever delays its own deliveries.
"""

import asyncio
import contextlib
import logging

from fastapi import WebSocket, WebSocketDisconnect

from roomcast.models.connection import Connection
from roomcast.websocket import router
from roomcast.websocket.manager import RoomRegistry

logger = logging.getLogger(__name__)


async def pump_outbox(conn: Connection, websocket: WebSocket) -> None:
    """Forward queued frames to the socket until cancelled or the send fails."""
    while True:
        frame = await conn.outbox.get()
        try:
            await websocket.send_text(frame)
        except Exception as exc:
            logger.info("Send to connection %s failed, marking closed: %s", conn.id, exc)
            conn.close()
            return


async def signaling_ws_handler(websocket: WebSocket, registry: RoomRegistry) -> None:
    """Full lifecycle handler for one /ws connection."""
    await websocket.accept()
    conn = registry.connect()
    pump = asyncio.create_task(pump_outbox(conn, websocket))

    try:
        # ── Message loop ───────────────────────────────────────────────
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue

            data = router.parse_envelope(raw)
            if data is None:
                continue

            try:
                router.dispatch(registry, conn, data)
            except Exception as exc:
                logger.error(
                    "signaling_ws_handler: error handling %r from connection %s: %s",
                    data.get("type"),
                    conn.id,
                    exc,
                    exc_info=True,
                )

    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.exception("signaling_ws_handler: unexpected error: %s", exc)
    finally:
        router.disconnect(registry, conn)
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump
