from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from connection import Connection
from protocol import SLOT_A_LABEL, SLOT_B_LABEL
from schemas.rooms import RoomListing
from logging_config import get_logger

logger = get_logger(__name__)


class RoomStoreError(Exception):
    pass


class AlreadyInRoomError(RoomStoreError):
    def __init__(self, conn: Connection):
        super().__init__(f"Connection {conn.connection_id} is already in room {conn.room_id}")
        self.conn = conn


class JoinResult(Enum):
    SUCCESS = "Success"
    ROOM_FULL = "Room is full"
    WRONG_PASSWORD = "Wrong password"
    ROOM_NOT_FOUND = "Room not found"
    ALREADY_IN_ROOM = "Already in this room"


@dataclass(eq=False)
class Room:
    room_id: str
    name: str
    password: str
    width: int
    height: int
    slot_a: Optional[Connection] = None
    slot_b: Optional[Connection] = None

    @property
    def occupants(self) -> List[Connection]:
        return [conn for conn in (self.slot_a, self.slot_b) if conn is not None]

    @property
    def occupant_count(self) -> int:
        return len(self.occupants)

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    @property
    def is_full(self) -> bool:
        return self.slot_a is not None and self.slot_b is not None

    @property
    def is_empty(self) -> bool:
        return self.slot_a is None and self.slot_b is None

    def other(self, conn: Connection) -> Optional[Connection]:
        if self.slot_a is conn:
            return self.slot_b
        if self.slot_b is conn:
            return self.slot_a
        return None

    def label_of(self, conn: Connection) -> str:
        return SLOT_A_LABEL if self.slot_a is conn else SLOT_B_LABEL


class RoomStore:
    """Owns every live room and keeps the room <-> connection references in step.

    Nothing outside this class may set a slot or a connection's room_id.
    """

    def __init__(self):
        self.rooms: Dict[str, Room] = {}
        self._next_id = 1

    def _allocate_id(self) -> str:
        room_id = str(self._next_id)
        self._next_id += 1
        return room_id

    def create_room(self, creator: Connection, name: str, password: str, width: int, height: int) -> str:
        if creator.room_id is not None:
            raise AlreadyInRoomError(creator)
        room_id = self._allocate_id()
        self.rooms[room_id] = Room(
            room_id=room_id,
            name=name,
            password=password or "",
            width=width,
            height=height,
            slot_a=creator,
        )
        creator.room_id = room_id
        logger.info(f"Room {room_id} created by {creator.connection_id}: name={name}, size={width}x{height}, password={'yes' if password else 'no'}")
        return room_id

    def join_room(self, joiner: Connection, room_id: str, password: str) -> Tuple[JoinResult, Optional[Room]]:
        if joiner.room_id is not None:
            raise AlreadyInRoomError(joiner)
        room = self.rooms.get(room_id)
        if room is None:
            logger.info(f"Join failed for {joiner.connection_id}: room {room_id} not found")
            return JoinResult.ROOM_NOT_FOUND, None
        if room.is_full:
            logger.info(f"Join failed for {joiner.connection_id}: room {room_id} is full")
            return JoinResult.ROOM_FULL, None
        if room.password and room.password != password:
            logger.warning(f"Join failed for {joiner.connection_id}: wrong password for room {room_id}")
            return JoinResult.WRONG_PASSWORD, None

        # A room whose creator left keeps its remaining occupant in slot_b
        if room.slot_a is None:
            room.slot_a = joiner
        else:
            room.slot_b = joiner
        joiner.room_id = room_id
        logger.info(f"Connection {joiner.connection_id} joined room {room_id}")
        return JoinResult.SUCCESS, room

    def leave_room(self, conn: Connection) -> Optional[Connection]:
        """Remove conn from its room. Returns the occupant left behind, if any."""
        room_id = conn.room_id
        if room_id is None:
            return None
        conn.room_id = None

        room = self.rooms.get(room_id)
        if room is None:
            return None
        if room.slot_a is conn:
            room.slot_a = None
        elif room.slot_b is conn:
            room.slot_b = None

        if room.is_empty:
            del self.rooms[room_id]
            logger.info(f"Room {room_id} deleted")
            return None

        remaining = room.occupants[0]
        logger.info(f"Connection {conn.connection_id} left room {room_id}, {remaining.connection_id} remains")
        return remaining

    def get_opponent(self, conn: Connection) -> Optional[Connection]:
        if conn.room_id is None:
            return None
        room = self.rooms.get(conn.room_id)
        if room is None:
            return None
        return room.other(conn)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def list_joinable_rooms(self) -> List[RoomListing]:
        """Rooms with a free slot, in store iteration order."""
        return [
            RoomListing(
                room_id=room.room_id,
                name=room.name,
                has_password=room.has_password,
                occupant_count=room.occupant_count,
            )
            for room in self.rooms.values()
            if not room.is_full
        ]
