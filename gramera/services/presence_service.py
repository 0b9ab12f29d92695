"""
Session lifecycle and presence broadcasting.

Owns the set of open sessions and is the only writer of the
ConnectionRegistry. Every registry change is followed by a full
presence-list broadcast to all open sessions.
"""

from __future__ import annotations

import asyncio
import logging

from gramera.core.registry import ConnectionRegistry
from gramera.core.session import Session, SessionState, Transport
from gramera.schemas.realtime import PresenceEntry, ServerEvent

logger = logging.getLogger(__name__)


class PresenceService:
    """
    Drives each session through CONNECTED → IDENTIFIED → CLOSED.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry
        self._sessions: dict[str, Session] = {}

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def open_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    # ------------------------------------------------------------------
    # Connect
    # ------------------------------------------------------------------

    def open_session(self, transport: Transport, session_id: str | None = None) -> Session:
        """Track a newly accepted transport. Nothing is broadcast until it identifies."""
        session = Session(transport, session_id=session_id)
        self._sessions[session.session_id] = session
        logger.info("Session opened: session_id=%s", session.session_id)
        return session

    # ------------------------------------------------------------------
    # Identify
    # ------------------------------------------------------------------

    async def identify(self, session: Session, identity: str) -> None:
        """
        Bind ``identity`` to ``session`` and broadcast presence.
        Re-identifying simply overwrites the previous binding.
        """
        if not session.is_open:
            logger.warning(
                "Ignoring identify on closed session: session_id=%s identity=%s",
                session.session_id,
                identity,
            )
            return

        self._registry.upsert(identity, session)
        session.identity = identity
        session.state = SessionState.identified
        logger.info(
            "Session identified: session_id=%s identity=%s",
            session.session_id,
            identity,
        )
        await self.broadcast_presence()

    # ------------------------------------------------------------------
    # Disconnect
    # ------------------------------------------------------------------

    async def close(self, session: Session) -> None:
        """
        Handle transport disconnect. Safe to call more than once;
        only the first call touches the registry and broadcasts.
        """
        if not session.is_open:
            return

        session.state = SessionState.closed
        self._sessions.pop(session.session_id, None)
        removed = self._registry.remove_by_session(session)
        logger.info(
            "Session closed: session_id=%s identity=%s",
            session.session_id,
            removed,
        )
        await self.broadcast_presence()

    # ------------------------------------------------------------------
    # Presence
    # ------------------------------------------------------------------

    def presence_list(self) -> list[PresenceEntry]:
        return [
            PresenceEntry(identity=entry.identity, session_id=entry.session.session_id)
            for entry in self._registry.snapshot()
        ]

    async def broadcast_presence(self) -> None:
        """
        Send the current presence list to every open session.
        A failing session is logged and skipped; the rest still receive it.
        """
        if not self._sessions:
            return

        payload = [entry.model_dump(by_alias=True) for entry in self.presence_list()]
        recipients = list(self._sessions.values())

        async def safe_send(session: Session) -> None:
            try:
                await session.send(ServerEvent.presence_list.value, payload)
            except Exception as exc:
                logger.warning(
                    "Failed to send presence to session_id=%s: %s",
                    session.session_id,
                    exc,
                )

        await asyncio.gather(
            *[safe_send(session) for session in recipients],
            return_exceptions=True,
        )
