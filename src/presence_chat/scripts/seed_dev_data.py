"""Seed development data: creates demo users and a short chat history."""
from __future__ import annotations

import asyncio
import logging

from presence_chat.application.dto.auth import SignupDTO
from presence_chat.application.exceptions import ConflictError
from presence_chat.application.ports.clock import SystemClock
from presence_chat.config import settings
from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.infrastructure.auth.password_hasher import Pbkdf2PasswordHasher
from presence_chat.infrastructure.db.session import AsyncSessionLocal, create_tables
from presence_chat.infrastructure.db.uow import SqlAlchemyUoW
from presence_chat.services import auth_service, message_service

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("alice", "Alice"),
    ("bob", "Bob"),
]


async def seed() -> None:
    await create_tables()
    hasher = Pbkdf2PasswordHasher(iterations=settings.PASSWORD_HASH_ITERATIONS)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        users: dict[str, ChatUser] = {}
        for username, display_name in DEMO_USERS:
            try:
                user = await auth_service.create_user(
                    SignupDTO(username=username, password="password", display_name=display_name),
                    hasher,
                    uow,
                )
            except ConflictError:
                user = await uow.users.get_by_username(username)
                assert user is not None
            users[username] = ChatUser(id=user.id, name=user.display_name)

        messages_data = [
            ("alice", "Hi there! Is anyone around?"),
            ("bob", "Hey Alice, I'm here."),
            ("alice", "Open a second tab and watch presence stay at one."),
        ]
        now = SystemClock().now_ms()
        for offset, (username, text) in enumerate(messages_data):
            message = message_service.build_chat_message(users[username], text, now + offset)
            assert message is not None
            await uow.messages_w.append(message)

        await uow.commit()
        logger.info("Seeded %d users and %d messages", len(users), len(messages_data))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
