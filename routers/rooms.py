from typing import List

from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse, RoomListing
from dispatcher import command_router
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=List[RoomListing])
async def list_rooms(request: Request):
    """Joinable rooms, same content as the ROOM_LIST directory message."""
    client_host = request.client.host if request.client else 'unknown'
    rooms = command_router.store.list_joinable_rooms()
    logger.info(f"Room list request from {client_host}: {len(rooms)} joinable rooms")
    return rooms


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get details of a live room. The password itself is never returned.

    Returns:
    - room_id, name
    - has_password: Whether joining requires a password
    - occupant_count: 1 or 2
    - width, height: Shared session dimensions
    - is_full: Whether both slots are taken
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    room = command_router.store.get_room(room_id)
    if not room:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_id=room.room_id,
        name=room.name,
        has_password=room.has_password,
        occupant_count=room.occupant_count,
        width=room.width,
        height=room.height,
        is_full=room.is_full,
    )
