"""Reference-counted presence per user id.

A user is online while at least one connection is counted for them. Only the
0 -> 1 and 1 -> 0 transitions produce events, so a user with several tabs
open is announced once and retired once.

The tracker does no locking of its own; callers serialize access (see
``BroadcastRouter``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from presence_chat.application.ports.clock import Clock, SystemClock
from presence_chat.domain.events.presence_changed import PresenceChanged
from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.domain.value_objects.enums import PresenceStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PresenceEntry:
    user: ChatUser
    ref_count: int = 0
    last_seen: int | None = None


@dataclass(frozen=True, slots=True)
class PresenceSnapshot:
    user: ChatUser
    ref_count: int
    last_seen: int | None


def _valid_id(user_id: str | None) -> bool:
    return bool(user_id and user_id.strip())


class PresenceTracker:
    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, PresenceEntry] = {}

    def join(self, user: ChatUser) -> PresenceChanged | None:
        """Count one more connection for ``user``; report 0 -> 1 transitions."""
        if not _valid_id(user.id):
            return None
        entry = self._entries.get(user.id)
        if entry is None:
            entry = PresenceEntry(user=user)
            self._entries[user.id] = entry
        else:
            entry.user = user
        entry.ref_count += 1
        entry.last_seen = self._clock.now_ms()
        if entry.ref_count == 1:
            logger.info("User %s is online", user.id)
            return PresenceChanged(user=user, status=PresenceStatus.ONLINE)
        logger.debug("User %s joined again (refs=%d)", user.id, entry.ref_count)
        return None

    def leave(self, user_id: str) -> PresenceChanged | None:
        """Release one connection for ``user_id``; report -> 0 transitions.

        Unknown ids are ignored so duplicate leaves cannot push a count
        below zero.
        """
        if not _valid_id(user_id):
            return None
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        entry.ref_count -= 1
        entry.last_seen = self._clock.now_ms()
        if entry.ref_count <= 0:
            del self._entries[user_id]
            logger.info("User %s is offline", user_id)
            return PresenceChanged(user=entry.user, status=PresenceStatus.OFFLINE)
        logger.debug("User %s left one connection (refs=%d)", user_id, entry.ref_count)
        return None

    def ping(self, user_id: str) -> None:
        """Refresh the advisory last-seen time of an online user.

        Does not affect presence; pings for users without an entry are ignored.
        """
        if not _valid_id(user_id):
            return
        entry = self._entries.get(user_id)
        if entry is not None:
            entry.last_seen = self._clock.now_ms()

    def is_online(self, user_id: str) -> bool:
        return user_id in self._entries

    def ref_count(self, user_id: str) -> int:
        entry = self._entries.get(user_id)
        return entry.ref_count if entry else 0

    def last_seen(self, user_id: str) -> int | None:
        entry = self._entries.get(user_id)
        return entry.last_seen if entry else None

    def snapshot(self) -> list[PresenceSnapshot]:
        return [
            PresenceSnapshot(
                user=entry.user,
                ref_count=entry.ref_count,
                last_seen=entry.last_seen,
            )
            for _user_id, entry in sorted(self._entries.items())
        ]
