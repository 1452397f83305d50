from fastapi import APIRouter, Depends

from roomcast.api.deps import get_registry
from roomcast.schemas.room import HealthResponse
from roomcast.websocket.manager import RoomRegistry

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: RoomRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(status="healthy", rooms=registry.room_count, connections=registry.connection_count)
