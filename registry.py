from typing import Set

from connection import Connection, deliver
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    """Every live connection, whether or not it sits in a room."""

    def __init__(self):
        self.connections: Set[Connection] = set()

    def register(self, conn: Connection):
        self.connections.add(conn)
        logger.debug(f"Registered connection {conn.connection_id} (live connections: {len(self.connections)})")

    def unregister(self, conn: Connection):
        # KeyError here means a second unregister for the same connection
        self.connections.remove(conn)
        logger.debug(f"Unregistered connection {conn.connection_id} (live connections: {len(self.connections)})")

    def broadcast(self, message: str) -> int:
        """Send message to every registered connection. Returns how many sends succeeded."""
        delivered = 0
        for conn in list(self.connections):
            if deliver(conn, message):
                delivered += 1
        logger.debug(f"Broadcast delivered to {delivered}/{len(self.connections)} connections")
        return delivered

    def __contains__(self, conn) -> bool:
        return conn in self.connections

    def __len__(self) -> int:
        return len(self.connections)
