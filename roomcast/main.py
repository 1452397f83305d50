"""
roomcast: FastAPI entry point.

Serves the landing page, a small HTTP discovery surface and the /ws
signaling endpoint. All room state lives in memory for the lifetime of the
process.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from roomcast.api import health, landing, rooms
from roomcast.config import settings
from roomcast.websocket.handlers import signaling_ws_handler
from roomcast.websocket.manager import RoomRegistry

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.registry = RoomRegistry()
    logger.info("Room registry ready")
    yield


app = FastAPI(
    title="roomcast",
    description="Room-based WebRTC signaling relay",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
# allow_origins=["*"] is incompatible with allow_credentials=True; a wildcard
# entry switches to allow_origin_regex=".*" instead.
_cors_origins = [o for o in settings.CORS_ORIGINS if o != "*"]
_cors_regex = ".*" if len(_cors_origins) < len(settings.CORS_ORIGINS) else None

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_origin_regex=_cors_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(landing.router)
app.include_router(health.router)
app.include_router(rooms.router, prefix="/api")

# ---------------------------------------------------------------------------
# WebSocket endpoint
# ---------------------------------------------------------------------------


@app.websocket("/ws")
async def signaling_websocket_endpoint(websocket: WebSocket) -> None:
    await signaling_ws_handler(websocket, websocket.app.state.registry)


def run() -> None:
    """Console entry point: serve on HOST:PORT."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
