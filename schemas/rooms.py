from pydantic import BaseModel


class CreateRoomCommand(BaseModel):
    name: str
    password: str = ""
    width: int
    height: int

class JoinRoomCommand(BaseModel):
    room_id: str
    password: str = ""

class RoomListing(BaseModel):
    room_id: str
    name: str
    has_password: bool
    occupant_count: int

class RoomDetailsResponse(BaseModel):
    room_id: str
    name: str
    has_password: bool
    occupant_count: int
    width: int
    height: int
    is_full: bool
