from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from presence_chat.application.dto.principal import Principal


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        return Principal(
            user_id=str(payload["sub"]),
            display_name=payload.get("name", ""),
        )


class HS256Issuer:
    """Sign access tokens for authenticated users."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(seconds=ttl_seconds)

    def issue(self, principal: Principal) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": principal.user_id,
                "name": principal.display_name,
                "iat": now,
                "exp": now + self._ttl,
            },
            self._secret,
            algorithm=self._algorithm,
        )
