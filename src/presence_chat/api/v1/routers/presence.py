from __future__ import annotations

from fastapi import APIRouter

from presence_chat.api.deps import BroadcastRouterDep
from presence_chat.api.v1.schemas.presence import PresenceResponse, PresenceUserResponse

router = APIRouter(prefix="/api/v1/presence", tags=["presence"])


@router.get("", response_model=PresenceResponse)
async def online_users(broadcast_router: BroadcastRouterDep) -> PresenceResponse:
    return PresenceResponse(
        online=[
            PresenceUserResponse(
                id=entry.user.id,
                name=entry.user.name,
                connections=entry.ref_count,
                last_seen=entry.last_seen,
            )
            for entry in broadcast_router.tracker.snapshot()
        ],
        connections=len(broadcast_router.registry),
    )
