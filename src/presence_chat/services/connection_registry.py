"""In-process registry of live client connections."""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

from presence_chat.application.ports.transport import Transport
from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.domain.value_objects.ids import ConnectionHandle

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Connection:
    """One client connection with its own outbound queue.

    Frames are enqueued by ``ConnectionRegistry.broadcast`` and written by
    ``run_sender``, so a slow peer only ever delays itself.
    """

    handle: ConnectionHandle
    transport: Transport
    queue_size: int = 256
    user: ChatUser | None = None
    left_cleanly: bool = False
    _send_queue: asyncio.Queue[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._send_queue = asyncio.Queue(maxsize=self.queue_size)

    def offer(self, raw: str) -> bool:
        if not self.transport.is_sendable():
            return False
        try:
            self._send_queue.put_nowait(raw)
        except asyncio.QueueFull:
            logger.warning("Send queue full for %s, dropping frame", self.handle)
            return False
        return True

    async def run_sender(self) -> None:
        """Drain the outbound queue until cancelled."""
        while True:
            raw = await self._send_queue.get()
            try:
                if self.transport.is_sendable():
                    await self.transport.send_text(raw)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.debug("Send failed for %s", self.handle, exc_info=True)
            finally:
                self._send_queue.task_done()


class ConnectionRegistry:
    """Tracks live connections and the user each one is bound to.

    The binding is a back reference used on disconnect; counting users is
    the presence tracker's job.
    """

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._connections: dict[ConnectionHandle, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def register(self, transport: Transport) -> ConnectionHandle:
        handle = ConnectionHandle(uuid.uuid4().hex)
        self._connections[handle] = Connection(
            handle=handle,
            transport=transport,
            queue_size=self._queue_size,
        )
        logger.debug("Connection registered: %s (total=%d)", handle, len(self._connections))
        return handle

    def get(self, handle: ConnectionHandle) -> Connection | None:
        return self._connections.get(handle)

    def bound_user(self, handle: ConnectionHandle) -> ChatUser | None:
        conn = self._connections.get(handle)
        return conn.user if conn else None

    def bind(self, handle: ConnectionHandle, user: ChatUser) -> None:
        """Associate a connection with a user. Last write wins."""
        conn = self._connections.get(handle)
        if conn is None:
            return
        conn.user = user
        conn.left_cleanly = False

    def mark_left_cleanly(self, handle: ConnectionHandle) -> None:
        conn = self._connections.get(handle)
        if conn is not None:
            conn.left_cleanly = True

    def unregister(self, handle: ConnectionHandle) -> tuple[ChatUser | None, bool]:
        """Remove a connection.

        Returns the bound user (if any) and whether it already left cleanly,
        so the caller knows whether presence still has to be released.
        """
        conn = self._connections.pop(handle, None)
        if conn is None:
            return None, True
        logger.debug("Connection unregistered: %s (total=%d)", handle, len(self._connections))
        return conn.user, conn.left_cleanly

    def broadcast(self, raw: str) -> int:
        """Queue ``raw`` on every sendable connection; return how many took it."""
        delivered = 0
        for conn in list(self._connections.values()):
            if conn.offer(raw):
                delivered += 1
        return delivered
