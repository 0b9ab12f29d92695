"""
Pydantic schemas for the real-time WebSocket protocol.

Every frame is a JSON object ``{"event": <name>, "data": <payload>}``.
Wire keys are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

import enum
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gramera.core.exceptions import MalformedEventError


class ClientEvent(str, enum.Enum):
    identify = "identify"
    message = "message"
    typing_start = "typing-start"
    typing_stop = "typing-stop"


class ServerEvent(str, enum.Enum):
    presence_list = "presence-list"
    message = "message"
    typing_start = "typing-start"
    typing_stop = "typing-stop"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


# ---------------------------------------------------------------------------
# Client → server
# ---------------------------------------------------------------------------

class IdentifyEvent(_WireModel):
    identity: str = Field(min_length=1)


class MessageEvent(_WireModel):
    sender_identity: str = Field(alias="senderIdentity", min_length=1)
    recipient_identity: str = Field(alias="recipientIdentity", min_length=1)
    content: Any = None


class TypingEvent(_WireModel):
    sender_identity: str = Field(alias="senderIdentity", min_length=1)
    recipient_identity: str = Field(alias="recipientIdentity", min_length=1)


class ClientFrame(BaseModel):
    event: ClientEvent
    data: Any = None


# ---------------------------------------------------------------------------
# Server → client
# ---------------------------------------------------------------------------

class PresenceEntry(_WireModel):
    identity: str
    session_id: str = Field(alias="sessionId")


class PresenceListResponse(_WireModel):
    """Response for GET /presence."""
    data: list[PresenceEntry]
    total: int


class IncomingMessage(_WireModel):
    sender_identity: str = Field(alias="senderIdentity")
    content: Any = None


# ---------------------------------------------------------------------------
# Frame parsing
# ---------------------------------------------------------------------------

_PAYLOAD_MODELS: dict[ClientEvent, type[_WireModel]] = {
    ClientEvent.identify: IdentifyEvent,
    ClientEvent.message: MessageEvent,
    ClientEvent.typing_start: TypingEvent,
    ClientEvent.typing_stop: TypingEvent,
}


def parse_client_frame(raw: str | bytes | dict) -> tuple[ClientEvent, _WireModel]:
    """
    Validate one inbound frame.

    ``identify`` also accepts a bare identity string as its data, which is
    what most clients send.

    Raises MalformedEventError on invalid JSON, unknown events or payloads
    missing the identity / recipient fields.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            raise MalformedEventError("Frame is not valid JSON", raw) from exc

    try:
        frame = ClientFrame.model_validate(raw)
        data = frame.data
        if frame.event is ClientEvent.identify and not isinstance(data, dict):
            data = {"identity": data}
        payload = _PAYLOAD_MODELS[frame.event].model_validate(data)
    except ValidationError as exc:
        raise MalformedEventError(
            f"Invalid frame: {exc.error_count()} validation error(s)", raw
        ) from exc

    return frame.event, payload
