from __future__ import annotations

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class WebSocketTransport:
    """Adapts a Starlette WebSocket to the registry's Transport port."""

    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket

    def is_sendable(self) -> bool:
        return (
            self._ws.application_state == WebSocketState.CONNECTED
            and self._ws.client_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self._ws.send_text(data)
