from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from presence_chat.domain.entities.message import ChatMessage
from presence_chat.infrastructure.db.mappers import message as mapper
from presence_chat.infrastructure.db.models.message import ChatMessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_recent(self, limit: int) -> list[ChatMessage]:
        stmt = (
            select(ChatMessageModel)
            .order_by(ChatMessageModel.timestamp.desc(), ChatMessageModel.seq.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        rows = list(result.scalars().all())
        rows.reverse()
        return [mapper.model_to_entity(m) for m in rows]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, message: ChatMessage) -> None:
        self._session.add(mapper.entity_to_model(message))
        await self._session.flush()
