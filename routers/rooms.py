from fastapi import APIRouter, HTTPException, Query, Request
from schemas.rooms import RoomDetailsResponse, RoomListResponse, RoomSummary
from constants import ERROR_STREAM_NOT_FOUND
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=RoomListResponse)
async def list_rooms(request: Request, live_only: bool = Query(False, description="Only rooms that are streaming")):
    rooms = request.app.state.signaling.rooms.list_rooms()
    if live_only:
        rooms = [room for room in rooms if room.is_live]
    summaries = [
        RoomSummary(room_id=room.room_id, is_live=room.is_live, viewer_count=len(room.viewers))
        for room in sorted(rooms, key=lambda r: r.created_at)
    ]
    return RoomListResponse(rooms=summaries, total=len(summaries))


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(
    room_id: str,
    request: Request,
    include_viewers: bool = Query(False, description="Include viewer connection ids"),
):
    """
    Inspect one room.

    Returns:
    - room_id: Room identifier chosen by the publisher
    - publisher_id: Connection id of the publisher
    - viewer_count: Number of joined viewers
    - viewers: Viewer connection ids (only with include_viewers)
    - is_live: Whether the publisher has started the stream
    - created_at: When the publisher joined
    """
    room = request.app.state.signaling.rooms.get_room(room_id)
    if room is None:
        logger.debug(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail=ERROR_STREAM_NOT_FOUND)

    return RoomDetailsResponse(
        room_id=room.room_id,
        publisher_id=room.publisher,
        viewer_count=len(room.viewers),
        viewers=sorted(room.viewers) if include_viewers else None,
        is_live=room.is_live,
        created_at=room.created_at,
    )
