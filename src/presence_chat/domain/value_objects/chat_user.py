from __future__ import annotations

from dataclasses import dataclass

ANONYMOUS_ID = "anonymous"
ANONYMOUS_NAME = "Anonymous"


@dataclass(frozen=True, slots=True)
class ChatUser:
    """Identity carried in join / leave / ping / chat frames."""

    id: str
    name: str
