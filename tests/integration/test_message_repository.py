"""Repositories against a real in-memory SQLite database."""
from __future__ import annotations

import contextlib
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from presence_chat.application.exceptions import ConflictError
from presence_chat.domain.entities.user import User
from presence_chat.infrastructure.db import models  # noqa: F401
from presence_chat.infrastructure.db.base import Base
from presence_chat.infrastructure.db.message_log import SqlAlchemyMessageLog
from presence_chat.infrastructure.db.uow import SqlAlchemyUoW
from tests.conftest import make_message


@contextlib.asynccontextmanager
async def sqlite_sessions():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_list_recent_keeps_insertion_order_within_a_timestamp():
    async with sqlite_sessions() as session_factory:
        log = SqlAlchemyMessageLog(session_factory)
        for i in range(10):
            await log.append(make_message(text=f"m{i}", timestamp=1_000 + i // 3))

        async with session_factory() as session:
            recent = await SqlAlchemyUoW(session).messages.list_recent(5)

    assert [m.text for m in recent] == ["m5", "m6", "m7", "m8", "m9"]
    assert [m.timestamp for m in recent] == [1_001, 1_002, 1_002, 1_002, 1_003]


@pytest.mark.asyncio
async def test_list_recent_round_trips_message_fields():
    original = make_message(text="hello", timestamp=1_700_000_000_123)
    async with sqlite_sessions() as session_factory:
        await SqlAlchemyMessageLog(session_factory).append(original)

        async with session_factory() as session:
            [stored] = await SqlAlchemyUoW(session).messages.list_recent(80)

    assert stored == original


@pytest.mark.asyncio
async def test_duplicate_username_is_a_conflict():
    def _user(user_id):
        return User(
            id=user_id,
            username="alice",
            display_name="Alice",
            password_hash="x",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    async with sqlite_sessions() as session_factory:
        async with session_factory() as session:
            uow = SqlAlchemyUoW(session)
            await uow.users_w.create(_user("u1"))
            await uow.commit()

            with pytest.raises(ConflictError):
                await uow.users_w.create(_user("u2"))

            found = await uow.users.get_by_username("alice")

    assert found is not None
    assert found.id == "u1"
