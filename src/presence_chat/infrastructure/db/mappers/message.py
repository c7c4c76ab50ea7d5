from __future__ import annotations

from presence_chat.domain.entities.message import ChatMessage
from presence_chat.infrastructure.db.models.message import ChatMessageModel


def model_to_entity(model: ChatMessageModel) -> ChatMessage:
    return ChatMessage(
        id=model.id,
        user_id=model.user_id,
        user_name=model.user_name,
        text=model.text,
        timestamp=model.timestamp,
    )


def entity_to_model(entity: ChatMessage) -> ChatMessageModel:
    return ChatMessageModel(
        id=entity.id,
        user_id=entity.user_id,
        user_name=entity.user_name,
        text=entity.text,
        timestamp=entity.timestamp,
    )
