from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    CHAT = "chat"
    JOIN = "join"
    LEAVE = "leave"
    PING = "ping"


class PresenceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
