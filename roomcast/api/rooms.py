"""
Room discovery over plain HTTP.

Endpoints:
  GET /api/rooms?tag=music   → summaries of live rooms, optionally tag-filtered
"""

from fastapi import APIRouter, Depends, Query

from roomcast.api.deps import get_registry
from roomcast.schemas.room import RoomSummary
from roomcast.websocket.manager import RoomRegistry

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=list[RoomSummary])
async def list_rooms(
    tag: str | None = Query(default=None, max_length=100),
    registry: RoomRegistry = Depends(get_registry),
) -> list[RoomSummary]:
    """Same listing the list-rooms envelope returns."""
    return [RoomSummary.model_validate(summary) for summary in registry.list_rooms(tag)]
