"""Message bus - the set of open connections and the broadcast primitive."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from hub.models.messages import Envelope

logger = logging.getLogger(__name__)

Payload = Union[Envelope, str]


@dataclass
class Connection:
    """One open socket and its outbound queue."""

    id: str
    websocket: Any  # anything with ``async send_text(str)``
    remote_address: Optional[str] = None
    queue: "asyncio.Queue[str]" = field(default_factory=asyncio.Queue, repr=False)
    writer: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def label(self) -> str:
        return self.remote_address or self.id[:8]


def _encode(payload: Payload) -> str:
    return payload.encode() if isinstance(payload, Envelope) else payload


class MessageBus:
    """Tracks open connections and delivers unicast and broadcast messages.

    Each connection gets a writer task draining its own queue, so enqueueing
    never blocks and messages reach every socket in the order they were
    published. A connection whose socket fails is dropped silently.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, websocket: Any, remote_address: Optional[str] = None) -> Connection:
        """Add a socket to the broadcast set. Must be called from the event loop."""
        conn = Connection(
            id=uuid.uuid4().hex,
            websocket=websocket,
            remote_address=remote_address,
        )
        conn.writer = asyncio.create_task(self._drain(conn))
        self._connections[conn.id] = conn
        logger.debug(f"[Bus] Registered {conn.label} ({len(self._connections)} open)")
        return conn

    def unregister(self, conn_id: str) -> None:
        conn = self._connections.pop(conn_id, None)
        if conn is None:
            return
        if conn.writer is not None:
            conn.writer.cancel()
        logger.debug(f"[Bus] Unregistered {conn.label} ({len(self._connections)} open)")

    def count(self) -> int:
        return len(self._connections)

    def send(self, conn_id: str, payload: Payload) -> bool:
        """Queue a message for one connection. False if it is already gone."""
        conn = self._connections.get(conn_id)
        if conn is None:
            return False
        conn.queue.put_nowait(_encode(payload))
        return True

    def broadcast(self, payload: Payload) -> int:
        """Queue a message for every connection open right now.

        Returns:
            Number of connections the message was queued for
        """
        text = _encode(payload)
        targets = list(self._connections.values())
        for conn in targets:
            conn.queue.put_nowait(text)
        logger.debug(f"[Bus] Broadcast to {len(targets)} connection(s)")
        return len(targets)

    async def _drain(self, conn: Connection) -> None:
        while True:
            text = await conn.queue.get()
            try:
                await conn.websocket.send_text(text)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.debug(f"[Bus] Dropping {conn.label}: {e}")
                self._connections.pop(conn.id, None)
                return

    async def close_all(self) -> None:
        """Cancel every writer task (application shutdown)."""
        writers = [c.writer for c in self._connections.values() if c.writer is not None]
        self._connections.clear()
        for writer in writers:
            writer.cancel()
        await asyncio.gather(*writers, return_exceptions=True)
