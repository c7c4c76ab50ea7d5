"""Create database tables: python -m presence_chat.scripts.init_db"""
from __future__ import annotations

import asyncio
import logging

from presence_chat.infrastructure.db.session import create_tables, engine

logger = logging.getLogger(__name__)


async def init_db() -> None:
    await create_tables()
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_db())
    logger.info("Database initialized")
