from typing import Callable, Dict, Optional

from pydantic import ValidationError

import protocol
from backend import JoinResult, RoomStore
from broadcaster import DirectoryBroadcaster
from connection import Connection, deliver
from registry import ConnectionRegistry
from schemas.rooms import CreateRoomCommand, JoinRoomCommand
from logging_config import get_logger

logger = get_logger(__name__)


class CommandRouter:
    """Single owner of the room store and connection registry.

    Every method is synchronous and runs on the event loop thread, so each command is
    applied to rooms and back-references as one step.
    """

    def __init__(self, store: Optional[RoomStore] = None, registry: Optional[ConnectionRegistry] = None):
        self.store = store or RoomStore()
        self.registry = registry or ConnectionRegistry()
        self.directory = DirectoryBroadcaster(self.store, self.registry)
        self._handlers: Dict[str, Callable[[Connection, str], None]] = {
            protocol.CREATE_ROOM: self.create_room,
            protocol.JOIN_ROOM: self.join_room,
            protocol.LIST_ROOMS: self.list_rooms,
            protocol.STATE: self.relay_state,
            protocol.ATTACK: self.relay_attack,
            protocol.GAME_OVER: self.relay_game_over,
        }

    def connect(self, conn: Connection):
        self.registry.register(conn)
        logger.info(f"Connection {conn.connection_id} registered ({len(self.registry)} live)")

    def disconnect(self, conn: Connection):
        if conn not in self.registry:
            logger.debug(f"Disconnect for unregistered connection {conn.connection_id} ignored")
            return
        self._depart(conn)
        self.registry.unregister(conn)
        logger.info(f"Connection {conn.connection_id} closed ({len(self.registry)} live)")
        self.directory.refresh()

    def dispatch(self, conn: Connection, frame: str):
        command, payload = protocol.parse_frame(frame)
        handler = self._handlers.get(command)
        if handler is None:
            logger.debug(f"Ignoring unrecognized command {command!r} from {conn.connection_id}")
            return
        try:
            handler(conn, payload)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Ignoring malformed {command} from {conn.connection_id}: {e}")

    def _depart(self, conn: Connection) -> bool:
        """Take conn out of its room and tell whoever is left. Returns True if conn had a room."""
        if conn.room_id is None:
            return False
        remaining = self.store.leave_room(conn)
        if remaining is not None:
            deliver(remaining, protocol.OPPONENT_DISCONNECTED_MSG)
            deliver(remaining, protocol.GAME_OVER_MSG)
        return True

    def create_room(self, conn: Connection, payload: str):
        fields = payload.split(protocol.FIELD_SEPARATOR)
        if len(fields) != 4:
            raise ValueError(f"expected 4 fields, got {len(fields)}")
        name, password, width, height = fields
        request = CreateRoomCommand(name=name, password=password, width=width, height=height)

        if self._depart(conn):
            logger.info(f"Connection {conn.connection_id} left its previous room to create a new one")
        room_id = self.store.create_room(conn, request.name, request.password, request.width, request.height)
        deliver(conn, protocol.ROOM_CREATED_MSG.format(room_id=room_id))
        self.directory.refresh()

    def join_room(self, conn: Connection, payload: str):
        fields = payload.split(protocol.FIELD_SEPARATOR)
        if len(fields) > 2:
            raise ValueError(f"expected at most 2 fields, got {len(fields)}")
        request = JoinRoomCommand(room_id=fields[0], password=fields[1] if len(fields) > 1 else "")

        if conn.room_id is not None and conn.room_id == request.room_id:
            deliver(conn, protocol.JOIN_FAILED_MSG.format(reason=JoinResult.ALREADY_IN_ROOM.value))
            return

        departed = self._depart(conn)
        result, room = self.store.join_room(conn, request.room_id, request.password)
        if result is not JoinResult.SUCCESS:
            deliver(conn, protocol.JOIN_FAILED_MSG.format(reason=result.value))
            if departed:
                self.directory.refresh()
            return

        deliver(conn, protocol.JOIN_SUCCESS_MSG.format(room_id=room.room_id))
        occupants = room.occupants
        for occupant in occupants:
            opponent = room.other(occupant)
            deliver(occupant, protocol.OPPONENT_JOINED_MSG.format(label=room.label_of(opponent)))
        start_message = protocol.GAME_START_MSG.format(width=room.width, height=room.height)
        for occupant in occupants:
            deliver(occupant, start_message)
        self.directory.refresh()

    def list_rooms(self, conn: Connection, payload: str):
        deliver(conn, self.directory.snapshot())

    def _relay(self, conn: Connection, message: str):
        opponent = self.store.get_opponent(conn)
        if opponent is None:
            logger.debug(f"No opponent for {conn.connection_id}, dropping relay")
            return
        deliver(opponent, message)

    def relay_state(self, conn: Connection, payload: str):
        self._relay(conn, protocol.OPPONENT_STATE_MSG.format(payload=payload))

    def relay_attack(self, conn: Connection, payload: str):
        self._relay(conn, protocol.GARBAGE_MSG.format(payload=payload))

    def relay_game_over(self, conn: Connection, payload: str):
        self._relay(conn, protocol.OPPONENT_GAME_OVER_MSG)


command_router = CommandRouter()
