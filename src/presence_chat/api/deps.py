"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from presence_chat.application.dto.principal import Principal
from presence_chat.application.ports.auth import PasswordHasher, TokenIssuer, TokenVerifier
from presence_chat.config import settings
from presence_chat.infrastructure.auth.hs256_verifier import HS256Issuer, HS256Verifier
from presence_chat.infrastructure.auth.password_hasher import Pbkdf2PasswordHasher
from presence_chat.infrastructure.db.session import AsyncSessionLocal
from presence_chat.infrastructure.db.uow import SqlAlchemyUoW
from presence_chat.services.broadcast_router import BroadcastRouter

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


_verifier: TokenVerifier | None = None
_issuer: TokenIssuer | None = None
_hasher: PasswordHasher | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


def get_issuer() -> TokenIssuer:
    global _issuer  # noqa: PLW0603
    if _issuer is None:
        _issuer = HS256Issuer(
            settings.JWT_SECRET,
            settings.JWT_ALGORITHM,
            ttl_seconds=settings.JWT_TTL_SECONDS,
        )
    return _issuer


def get_password_hasher() -> PasswordHasher:
    global _hasher  # noqa: PLW0603
    if _hasher is None:
        _hasher = Pbkdf2PasswordHasher(iterations=settings.PASSWORD_HASH_ITERATIONS)
    return _hasher


IssuerDep = Annotated[TokenIssuer, Depends(get_issuer)]
HasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_broadcast_router(request: Request) -> BroadcastRouter:
    return request.app.state.broadcast_router


BroadcastRouterDep = Annotated[BroadcastRouter, Depends(get_broadcast_router)]
