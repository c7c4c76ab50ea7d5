from __future__ import annotations

from typing import Protocol

from presence_chat.domain.entities.message import ChatMessage


class MessageReader(Protocol):
    async def list_recent(self, limit: int) -> list[ChatMessage]:
        """Return the ``limit`` most recent messages, oldest first."""
        ...


class MessageWriter(Protocol):
    async def append(self, message: ChatMessage) -> None: ...


class MessageLog(Protocol):
    """Append-only history used by the broadcast router."""

    async def append(self, message: ChatMessage) -> None: ...
