from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from presence_chat.domain.value_objects.ids import ConnectionHandle
from presence_chat.infrastructure.ws.transport import WebSocketTransport
from presence_chat.services.broadcast_router import BroadcastRouter

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def ws_chat(websocket: WebSocket) -> None:
    broadcast_router: BroadcastRouter = websocket.app.state.broadcast_router

    await websocket.accept()
    handle = await broadcast_router.connect(WebSocketTransport(websocket))
    conn = broadcast_router.registry.get(handle)
    assert conn is not None

    sender_task = asyncio.create_task(conn.run_sender(), name=f"ws-sender-{handle}")
    try:
        await _read_loop(websocket, broadcast_router, handle)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", handle)
    finally:
        sender_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender_task
        await broadcast_router.disconnect(handle)


async def _read_loop(ws: WebSocket, broadcast_router: BroadcastRouter, handle: ConnectionHandle) -> None:
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000))
        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes")
        if raw is None:
            continue
        await broadcast_router.handle_frame(handle, raw)
