from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./chat.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_CREATE_TABLES: bool = True

    JWT_SECRET: str = "change-me-to-a-long-random-secret-value"
    JWT_ALGORITHM: str = "HS256"
    JWT_TTL_SECONDS: int = 7 * 24 * 3600

    PASSWORD_HASH_ITERATIONS: int = 200_000

    CORS_ORIGINS: list[str] = ["*"]

    CHAT_TEXT_MAX_LENGTH: int = 500
    HISTORY_DEFAULT_LIMIT: int = 80
    HISTORY_MIN_LIMIT: int = 10
    HISTORY_MAX_LIMIT: int = 200

    WS_SEND_QUEUE_SIZE: int = 256

    HOST: str = "0.0.0.0"
    PORT: int = 4000
    LOG_LEVEL: str = "info"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
