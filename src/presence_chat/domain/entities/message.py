from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: str
    user_id: str
    user_name: str
    text: str
    timestamp: int  # epoch millis
