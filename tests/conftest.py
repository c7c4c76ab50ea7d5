"""Shared test fixtures."""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from presence_chat.application.exceptions import ConflictError
from presence_chat.domain.entities.message import ChatMessage
from presence_chat.domain.entities.user import User
from presence_chat.services.broadcast_router import BroadcastRouter
from presence_chat.services.connection_registry import Connection, ConnectionRegistry
from presence_chat.services.presence_tracker import PresenceTracker


def make_message(
    *,
    text: str = "hello",
    timestamp: int = 1_700_000_000_000,
    user_id: str = "u1",
    user_name: str = "Alice",
) -> ChatMessage:
    return ChatMessage(
        id=str(uuid.uuid4()),
        user_id=user_id,
        user_name=user_name,
        text=text,
        timestamp=timestamp,
    )


def frame(type_: str, user_id: str | None = "u1", name: str | None = "Alice", **extra: Any) -> str:
    payload: dict[str, Any] = {"type": type_, **extra}
    if user_id is not None:
        payload["user"] = {"id": user_id, "name": name}
    return json.dumps(payload)


def received(conn: Connection) -> list[dict[str, Any]]:
    """Pop every frame queued for ``conn`` and decode it."""
    frames = []
    while not conn._send_queue.empty():
        frames.append(json.loads(conn._send_queue.get_nowait()))
        conn._send_queue.task_done()
    return frames


class FixedClock:
    def __init__(self, ms: int = 1_700_000_000_000) -> None:
        self.ms = ms

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.ms / 1000, tz=timezone.utc)

    def now_ms(self) -> int:
        return self.ms

    def advance(self, ms: int) -> None:
        self.ms += ms


@dataclass
class FakeTransport:
    sendable: bool = True
    fail: bool = False
    sent: list[str] = field(default_factory=list)

    def is_sendable(self) -> bool:
        return self.sendable

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)


@dataclass
class FakeMessageLog:
    messages: list[ChatMessage] = field(default_factory=list)
    fail: bool = False

    async def append(self, message: ChatMessage) -> None:
        if self.fail:
            raise RuntimeError("storage unavailable")
        self.messages.append(message)


@dataclass
class FakeMessageReader:
    _messages: list[ChatMessage] = field(default_factory=list)
    fail: bool = False

    async def list_recent(self, limit: int) -> list[ChatMessage]:
        if self.fail:
            raise RuntimeError("storage unavailable")
        ordered = sorted(self._messages, key=lambda m: m.timestamp)
        return ordered[-limit:]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def append(self, message: ChatMessage) -> None:
        self._reader._messages.append(message)


@dataclass
class FakeUserReader:
    _store: dict[str, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    async def get_by_username(self, username: str) -> User | None:
        for user in self._store.values():
            if user.username == username:
                return user
        return None


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader

    async def create(self, user: User) -> User:
        if await self._reader.get_by_username(user.username) is not None:
            raise ConflictError("Username already exists")
        self._reader._store[user.id] = user
        return user


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


class PlainTextHasher:
    """Reversible stand-in so auth tests do not pay for PBKDF2."""

    def hash(self, password: str) -> str:
        return f"plain${password}"

    def verify(self, password: str, encoded: str) -> bool:
        return encoded == f"plain${password}"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def tracker(clock: FixedClock) -> PresenceTracker:
    return PresenceTracker(clock=clock)


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry(queue_size=16)


@pytest.fixture
def message_log() -> FakeMessageLog:
    return FakeMessageLog()


@pytest.fixture
def router(
    tracker: PresenceTracker,
    registry: ConnectionRegistry,
    message_log: FakeMessageLog,
    clock: FixedClock,
) -> BroadcastRouter:
    return BroadcastRouter(tracker, registry, message_log, clock=clock)
