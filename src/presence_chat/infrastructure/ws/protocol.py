"""WebSocket frame models.

Inbound frames are parsed leniently and normalised by the broadcast router;
anything that does not fit the envelope is dropped. Outbound frames are
serialised with camelCase keys for browser clients.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from presence_chat.domain.entities.message import ChatMessage
from presence_chat.domain.value_objects.chat_user import ChatUser


def _scalar(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value).strip() or None
    return None


class WsInbound(BaseModel):
    """Client → Server."""

    type: str = Field(min_length=1)  # chat | join | leave | ping
    user: dict[str, Any] | None = None
    text: Any = None

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def user_id(self) -> str | None:
        return _scalar((self.user or {}).get("id"))

    def user_name(self) -> str | None:
        return _scalar((self.user or {}).get("name"))

    def chat_user(self, default_id: str, default_name: str) -> ChatUser:
        return ChatUser(
            id=self.user_id() or default_id,
            name=self.user_name() or default_name,
        )


class WsUser(BaseModel):
    id: str
    name: str

    @classmethod
    def from_user(cls, user: ChatUser) -> WsUser:
        return cls(id=user.id, name=user.name)


class WsChatMessage(BaseModel):
    id: str
    user_id: str
    user_name: str
    text: str
    timestamp: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, message: ChatMessage) -> WsChatMessage:
        return cls(
            id=message.id,
            user_id=message.user_id,
            user_name=message.user_name,
            text=message.text,
            timestamp=message.timestamp,
        )


class WsChatOutbound(BaseModel):
    """Server → all: a persisted chat message."""

    type: Literal["chat"] = "chat"
    message: WsChatMessage


class WsPresenceOutbound(BaseModel):
    """Server → all: join / leave / ping for a user."""

    type: Literal["join", "leave", "ping"]
    user: WsUser


WsOutbound = WsChatOutbound | WsPresenceOutbound


def encode(frame: WsOutbound) -> str:
    return frame.model_dump_json(by_alias=True)
