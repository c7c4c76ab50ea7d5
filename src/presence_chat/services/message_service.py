from __future__ import annotations

import re
import uuid
from typing import Any

from presence_chat.application.uow import UnitOfWork
from presence_chat.config import settings
from presence_chat.domain.entities.message import ChatMessage
from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.domain.value_objects.ids import MessageId

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def new_message_id() -> MessageId:
    return MessageId(str(uuid.uuid4()))


def normalize_text(text: Any, max_length: int | None = None) -> str | None:
    """Trim and truncate chat text. Returns None when nothing is left."""
    if max_length is None:
        max_length = settings.CHAT_TEXT_MAX_LENGTH
    if text is None or isinstance(text, (dict, list)):
        return None
    cleaned = str(text).strip()
    if not cleaned:
        return None
    return cleaned[:max_length]


def build_chat_message(
    user: ChatUser,
    text: Any,
    timestamp: int,
    *,
    message_id: str | None = None,
) -> ChatMessage | None:
    body = normalize_text(text)
    if body is None:
        return None
    return ChatMessage(
        id=message_id or new_message_id(),
        user_id=user.id,
        user_name=user.name,
        text=body,
        timestamp=timestamp,
    )


def parse_history_limit(raw: str | None) -> int | None:
    """Leading integer of a query value, or None when there is none."""
    match = _LEADING_INT.match(raw or "")
    return int(match.group()) if match else None


def clamp_history_limit(limit: int | None) -> int:
    if limit is None:
        return settings.HISTORY_DEFAULT_LIMIT
    return min(max(limit, settings.HISTORY_MIN_LIMIT), settings.HISTORY_MAX_LIMIT)


async def list_recent_messages(limit: int | None, uow: UnitOfWork) -> list[ChatMessage]:
    """Most recent messages, oldest first, with the limit clamped to the allowed range."""
    return await uow.messages.list_recent(clamp_history_limit(limit))
