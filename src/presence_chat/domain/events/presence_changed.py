from __future__ import annotations

from dataclasses import dataclass

from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.domain.value_objects.enums import PresenceStatus


@dataclass(frozen=True, slots=True)
class PresenceChanged:
    """Emitted when a user's ref count crosses 0 in either direction."""

    user: ChatUser
    status: PresenceStatus

    @property
    def is_online(self) -> bool:
        return self.status == PresenceStatus.ONLINE
