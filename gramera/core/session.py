"""
Live transport session.

One Session per accepted WebSocket. The session id is assigned here, when
the transport is accepted, and is never chosen by the client.
"""

from __future__ import annotations

import asyncio
import enum
import uuid
from typing import Any, Protocol


class Transport(Protocol):
    """Anything that can push a JSON frame to one client (e.g. fastapi.WebSocket)."""

    async def send_json(self, data: Any) -> None: ...


class SessionState(str, enum.Enum):
    connected = "connected"
    identified = "identified"
    closed = "closed"


def new_session_id() -> str:
    return uuid.uuid4().hex


class Session:
    """
    Handle for one live connection.

    Outbound frames go through ``send`` which holds a per-session lock, so a
    presence broadcast and a relayed message never interleave on the wire.
    """

    def __init__(self, transport: Transport, session_id: str | None = None) -> None:
        self.session_id = session_id or new_session_id()
        self.transport = transport
        self.state = SessionState.connected
        self.identity: str | None = None
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self.state is not SessionState.closed

    async def send(self, event: str, data: Any) -> None:
        async with self._send_lock:
            await self.transport.send_json({"event": event, "data": data})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self.session_id == other.session_id

    def __hash__(self) -> int:
        return hash(self.session_id)

    def __repr__(self) -> str:
        return (
            f"Session(session_id={self.session_id!r}, "
            f"identity={self.identity!r}, state={self.state.value})"
        )
