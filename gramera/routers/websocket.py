"""
WebSocket endpoint.
Presence tracking and direct-message / typing relay between online users.
"""

from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from gramera.core.dependencies import get_presence_service, get_relay
from gramera.core.exceptions import MalformedEventError
from gramera.core.session import Session
from gramera.schemas.realtime import ClientEvent, parse_client_frame
from gramera.services.presence_service import PresenceService
from gramera.services.relay_service import MessageRelay

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_frame(
    session: Session,
    raw: str | bytes,
    presence: PresenceService,
    relay: MessageRelay,
) -> None:
    """
    Validate and dispatch one inbound frame.
    Malformed frames are logged and dropped without touching the registry.
    """
    if not session.is_open:
        return

    try:
        event, payload = parse_client_frame(raw)
    except MalformedEventError as exc:
        logger.warning(
            "Dropping malformed frame from session_id=%s: %s",
            session.session_id,
            exc,
        )
        return

    if event is ClientEvent.identify:
        await presence.identify(session, payload.identity)
    elif event is ClientEvent.message:
        await relay.relay_message(
            payload.sender_identity,
            payload.recipient_identity,
            payload.content,
        )
    else:
        await relay.relay_typing(
            payload.sender_identity,
            payload.recipient_identity,
            starting=event is ClientEvent.typing_start,
        )


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    presence: PresenceService = Depends(get_presence_service),
    relay: MessageRelay = Depends(get_relay),
) -> None:
    """
    Connect: WS /api/v1/ws

    On connect:
    - Accept and open a session (unidentified)
    - Process frames one at a time, so a sender's events go out in order

    On disconnect:
    - Close the session: registry removal + presence broadcast
    """
    await websocket.accept()
    session = presence.open_session(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            await handle_frame(session, raw, presence, relay)

    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected: session_id=%s", session.session_id)
    except Exception as exc:
        logger.warning("WebSocket error for session_id=%s: %s", session.session_id, exc)
    finally:
        # Runs after the endpoint task may already be cancelled
        with anyio.CancelScope(shield=True):
            await presence.close(session)
