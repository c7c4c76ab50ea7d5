from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from presence_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from presence_chat.api.middleware.metrics import RequestTimingMiddleware
from presence_chat.api.v1.routers import auth, health, messages, presence, ws
from presence_chat.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from presence_chat.config import settings
from presence_chat.infrastructure.db.message_log import SqlAlchemyMessageLog
from presence_chat.infrastructure.db.session import AsyncSessionLocal, create_tables, engine
from presence_chat.services.broadcast_router import BroadcastRouter
from presence_chat.services.connection_registry import ConnectionRegistry
from presence_chat.services.presence_tracker import PresenceTracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if settings.DB_CREATE_TABLES:
        await create_tables()
        logger.info("Database tables ensured")

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


def build_broadcast_router() -> BroadcastRouter:
    return BroadcastRouter(
        tracker=PresenceTracker(),
        registry=ConnectionRegistry(queue_size=settings.WS_SEND_QUEUE_SIZE),
        message_log=SqlAlchemyMessageLog(AsyncSessionLocal),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Presence Chat",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.broadcast_router = build_broadcast_router()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(messages.router)
    app.include_router(presence.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(UnauthorizedError)
    async def _unauthorized(_req: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
