from pydantic import BaseModel
from typing import Optional


class RoomSummary(BaseModel):
    room_id: str
    is_live: bool
    viewer_count: int


class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]
    total: int


class RoomDetailsResponse(BaseModel):
    room_id: str
    publisher_id: Optional[str]
    viewer_count: int
    viewers: Optional[list[str]] = None
    is_live: bool
    created_at: str


class HealthResponse(BaseModel):
    status: str
    rooms: int
    connections: int
