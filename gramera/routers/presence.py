"""
Presence endpoint.

GET /presence: users currently identified on a live WebSocket session
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from gramera.core.dependencies import get_presence_service
from gramera.schemas.realtime import PresenceListResponse
from gramera.services.presence_service import PresenceService

router = APIRouter()


@router.get(
    "/presence",
    response_model=PresenceListResponse,
    summary="List online users",
)
async def list_presence(
    presence: PresenceService = Depends(get_presence_service),
) -> PresenceListResponse:
    entries = presence.presence_list()
    return PresenceListResponse(data=entries, total=len(entries))
