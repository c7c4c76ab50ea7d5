from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from presence_chat.domain.entities.message import ChatMessage
from presence_chat.infrastructure.db.uow import SqlAlchemyUoW


class SqlAlchemyMessageLog:
    """Message log for the broadcast router: one short transaction per append."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, message: ChatMessage) -> None:
        async with self._session_factory() as session:
            async with SqlAlchemyUoW(session) as uow:
                await uow.messages_w.append(message)
                await uow.commit()
