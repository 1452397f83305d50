from pydantic import BaseModel, Field


class RoomSummary(BaseModel):
    room_id: str = Field(..., alias="roomId")
    title: str
    tags: list[str] = []
    participant_count: int = Field(..., alias="participantCount", ge=1)

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    status: str
    rooms: int
    connections: int
