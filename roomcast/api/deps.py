from fastapi import Request

from roomcast.websocket.manager import RoomRegistry


def get_registry(request: Request) -> RoomRegistry:
    """The process-wide registry created in the app lifespan."""
    return request.app.state.registry
