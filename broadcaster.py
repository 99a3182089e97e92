from typing import Iterable

from backend import RoomStore
from protocol import ROOM_LIST_ENTRY, ROOM_LIST_PREFIX
from registry import ConnectionRegistry
from schemas.rooms import RoomListing
from logging_config import get_logger

logger = get_logger(__name__)


def format_room_list(listings: Iterable[RoomListing]) -> str:
    entries = "".join(
        ROOM_LIST_ENTRY.format(
            room_id=listing.room_id,
            name=listing.name,
            has_password="true" if listing.has_password else "false",
            occupant_count=listing.occupant_count,
        )
        for listing in listings
    )
    return ROOM_LIST_PREFIX + entries


class DirectoryBroadcaster:
    def __init__(self, store: RoomStore, registry: ConnectionRegistry):
        self.store = store
        self.registry = registry

    def snapshot(self) -> str:
        return format_room_list(self.store.list_joinable_rooms())

    def refresh(self):
        """Push the current joinable-room listing to every live connection."""
        message = self.snapshot()
        logger.debug(f"Refreshing room directory for {len(self.registry)} connections: {message}")
        self.registry.broadcast(message)
