import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import WebSocket

from constants import OUTBOX_MAX_MESSAGES
from logging_config import get_logger

logger = get_logger(__name__)


class Connection(ABC):
    """A live client handle the relay can send text to.

    room_id is the back-reference to the room this connection occupies. Only the
    RoomStore assigns or clears it.
    """

    def __init__(self, connection_id: Optional[str] = None):
        self.connection_id = connection_id or uuid.uuid4().hex
        self.room_id: Optional[str] = None

    @abstractmethod
    def send(self, message: str):
        """Queue or write message to the client without blocking."""

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.connection_id[:8]} room={self.room_id}>"


class WebSocketConnection(Connection):
    """Connection backed by a FastAPI WebSocket.

    send() never awaits the network. Messages go into a bounded outbox drained by a
    writer task, so one slow peer cannot hold up delivery to everybody else.
    """

    def __init__(self, websocket: WebSocket, max_pending: int = OUTBOX_MAX_MESSAGES):
        super().__init__()
        self.websocket = websocket
        self.outbox: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self.broken = False
        self._writer: Optional[asyncio.Task] = None

    def start(self):
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain_outbox())

    def send(self, message: str):
        if self.broken:
            logger.debug(f"Dropping message for broken connection {self.connection_id}")
            return
        try:
            self.outbox.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for connection {self.connection_id}, dropping message")

    async def _drain_outbox(self):
        while True:
            message = await self.outbox.get()
            try:
                await self.websocket.send_text(message)
            except Exception as e:
                self.broken = True
                logger.warning(f"Error sending to connection {self.connection_id}: {e}")
                return

    async def stop(self):
        if self._writer is None:
            return
        self._writer.cancel()
        try:
            await self._writer
        except asyncio.CancelledError:
            pass
        self._writer = None


def deliver(conn: Connection, message: str) -> bool:
    """Best-effort send. Failures are logged, never raised."""
    try:
        conn.send(message)
        return True
    except Exception as e:
        logger.warning(f"Error sending to connection {conn.connection_id}: {e}", exc_info=True)
        return False
