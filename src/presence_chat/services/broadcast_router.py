"""Routes inbound WebSocket frames to presence and history, then fans out.

All tracker and registry mutations happen under one ``asyncio.Lock``.
Message persistence is awaited outside that lock, before the broadcast, so a
slow or failing store never stalls presence handling.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from presence_chat.application.ports.clock import Clock, SystemClock
from presence_chat.application.ports.transport import Transport
from presence_chat.application.repositories.message import MessageLog
from presence_chat.domain.events.presence_changed import PresenceChanged
from presence_chat.domain.value_objects.chat_user import ANONYMOUS_ID, ANONYMOUS_NAME, ChatUser
from presence_chat.domain.value_objects.enums import EventType
from presence_chat.domain.value_objects.ids import ConnectionHandle
from presence_chat.infrastructure.ws.protocol import (
    WsChatMessage,
    WsChatOutbound,
    WsInbound,
    WsOutbound,
    WsPresenceOutbound,
    WsUser,
    encode,
)
from presence_chat.services import message_service
from presence_chat.services.connection_registry import ConnectionRegistry
from presence_chat.services.presence_tracker import PresenceTracker

logger = logging.getLogger(__name__)


def _presence_frame(event_type: EventType, user: ChatUser) -> WsPresenceOutbound:
    return WsPresenceOutbound(type=event_type.value, user=WsUser.from_user(user))


def _from_change(change: PresenceChanged | None) -> list[WsOutbound]:
    if change is None:
        return []
    event_type = EventType.JOIN if change.is_online else EventType.LEAVE
    return [_presence_frame(event_type, change.user)]


class BroadcastRouter:
    def __init__(
        self,
        tracker: PresenceTracker,
        registry: ConnectionRegistry,
        message_log: MessageLog,
        clock: Clock | None = None,
    ) -> None:
        self.tracker = tracker
        self.registry = registry
        self.message_log = message_log
        self._clock = clock or SystemClock()
        self._lock = asyncio.Lock()

    # -- connection lifecycle -------------------------------------------------

    async def connect(self, transport: Transport) -> ConnectionHandle:
        async with self._lock:
            return self.registry.register(transport)

    async def disconnect(self, handle: ConnectionHandle) -> list[WsOutbound]:
        """Unregister a connection, releasing presence if it never sent ``leave``."""
        async with self._lock:
            user, already_left = self.registry.unregister(handle)
            change = None
            if user is not None and not already_left:
                change = self.tracker.leave(user.id)
        return self._fan_out(_from_change(change))

    # -- inbound frames -------------------------------------------------------

    async def handle_frame(self, handle: ConnectionHandle, raw: str | bytes) -> list[WsOutbound]:
        """Process one raw frame; return the frames that were broadcast.

        Undecodable or malformed frames are dropped without a reply.
        """
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError, RecursionError):
            logger.debug("Dropping undecodable frame from %s", handle)
            return []
        return await self.handle_event(handle, payload)

    async def handle_event(self, handle: ConnectionHandle, payload: Any) -> list[WsOutbound]:
        if not isinstance(payload, dict):
            logger.debug("Dropping non-object frame from %s", handle)
            return []
        try:
            msg = WsInbound.model_validate(payload)
        except PydanticValidationError:
            logger.debug("Dropping malformed frame from %s", handle)
            return []

        if msg.type == EventType.CHAT:
            return await self._handle_chat(msg)
        if msg.type == EventType.JOIN:
            return await self._handle_join(handle, msg)
        if msg.type == EventType.LEAVE:
            return await self._handle_leave(handle, msg)
        if msg.type == EventType.PING:
            return await self._handle_ping(msg)

        logger.debug("Dropping frame with unknown type %r from %s", msg.type, handle)
        return []

    async def _handle_chat(self, msg: WsInbound) -> list[WsOutbound]:
        user = msg.chat_user(ANONYMOUS_ID, ANONYMOUS_NAME)
        message = message_service.build_chat_message(user, msg.text, self._clock.now_ms())
        if message is None:
            return []
        try:
            await self.message_log.append(message)
        except Exception:
            logger.exception("Failed to persist message %s, not broadcasting", message.id)
            return []
        frame = WsChatOutbound(message=WsChatMessage.from_entity(message))
        return self._fan_out([frame])

    async def _handle_join(self, handle: ConnectionHandle, msg: WsInbound) -> list[WsOutbound]:
        user_id = msg.user_id()
        if user_id is None:
            return []
        user = ChatUser(id=user_id, name=msg.user_name() or ANONYMOUS_NAME)
        changes: list[PresenceChanged | None] = []
        async with self._lock:
            conn = self.registry.get(handle)
            if conn is None:
                return []
            current = conn.user if not conn.left_cleanly else None
            if current is not None and current.id == user.id:
                # already counted for this connection
                self.registry.bind(handle, user)
                return []
            if current is not None:
                changes.append(self.tracker.leave(current.id))
            changes.append(self.tracker.join(user))
            self.registry.bind(handle, user)
        frames: list[WsOutbound] = []
        for change in changes:
            frames.extend(_from_change(change))
        return self._fan_out(frames)

    async def _handle_leave(self, handle: ConnectionHandle, msg: WsInbound) -> list[WsOutbound]:
        user_id = msg.user_id()
        if user_id is None:
            return []
        async with self._lock:
            conn = self.registry.get(handle)
            if conn is None or conn.left_cleanly or conn.user is None or conn.user.id != user_id:
                logger.debug("Ignoring leave for %s on %s: not counted here", user_id, handle)
                return []
            change = self.tracker.leave(user_id)
            self.registry.mark_left_cleanly(handle)
        return self._fan_out(_from_change(change))

    async def _handle_ping(self, msg: WsInbound) -> list[WsOutbound]:
        user_id = msg.user_id()
        if user_id is None:
            return []
        async with self._lock:
            self.tracker.ping(user_id)
        user = ChatUser(id=user_id, name=msg.user_name() or ANONYMOUS_NAME)
        return self._fan_out([_presence_frame(EventType.PING, user)])

    def _fan_out(self, frames: list[WsOutbound]) -> list[WsOutbound]:
        for frame in frames:
            self.registry.broadcast(encode(frame))
        return frames
