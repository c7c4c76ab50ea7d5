from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from presence_chat.api.deps import UoWDep
from presence_chat.api.v1.schemas.message import MessageResponse
from presence_chat.services import message_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("", response_model=list[MessageResponse])
async def list_messages(
    uow: UoWDep,
    limit: str | None = Query(None),
) -> list[MessageResponse]:
    try:
        messages = await message_service.list_recent_messages(
            message_service.parse_history_limit(limit), uow,
        )
    except Exception as exc:
        logger.exception("Failed to load messages")
        raise HTTPException(status_code=500, detail="Failed to load messages") from exc
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]
