from __future__ import annotations

from typing import Protocol


class Transport(Protocol):
    """Outbound half of a client connection as seen by the connection registry."""

    def is_sendable(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...
