from __future__ import annotations

from typing import Protocol

from presence_chat.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def get_by_username(self, username: str) -> User | None: ...


class UserWriter(Protocol):
    async def create(self, user: User) -> User:
        """Insert user. Raise ConflictError if the username is taken."""
        ...
