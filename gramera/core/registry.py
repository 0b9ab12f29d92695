"""
Connection registry.

In-memory map of identity (str) → live Session, single process only.
Empty after every restart; clients re-identify after reconnecting.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from gramera.core.session import Session

logger = logging.getLogger(__name__)


class RegistryEntry(NamedTuple):
    identity: str
    session: Session


class ConnectionRegistry:
    """
    Maps identity → Session, and Session → identity.

    At most one entry per identity (last identify wins) and at most one
    entry per session. None of the methods await, so on one event loop
    every call is atomic with respect to other coroutines.
    """

    def __init__(self) -> None:
        self._by_identity: dict[str, Session] = {}
        self._by_session: dict[str, str] = {}

    def upsert(self, identity: str, session: Session) -> None:
        """Insert or overwrite the entry for ``identity``."""
        previous_identity = self._by_session.get(session.session_id)
        if previous_identity is not None and previous_identity != identity:
            # Session re-identified under another name
            self._by_identity.pop(previous_identity, None)

        replaced = self._by_identity.get(identity)
        if replaced is not None and replaced.session_id != session.session_id:
            self._by_session.pop(replaced.session_id, None)
            logger.info(
                "Identity %s moved from session %s to %s",
                identity,
                replaced.session_id,
                session.session_id,
            )

        self._by_identity[identity] = session
        self._by_session[session.session_id] = identity

    def remove_by_session(self, session: Session) -> str | None:
        """
        Remove the entry owned by ``session``.

        Returns the identity that was removed, or None when the session owns
        no entry (never identified, or superseded by a newer session).
        """
        identity = self._by_session.pop(session.session_id, None)
        if identity is None:
            return None
        owner = self._by_identity.get(identity)
        if owner is not None and owner.session_id == session.session_id:
            del self._by_identity[identity]
        return identity

    def find(self, identity: str) -> Session | None:
        return self._by_identity.get(identity)

    def snapshot(self) -> list[RegistryEntry]:
        return [
            RegistryEntry(identity, session)
            for identity, session in self._by_identity.items()
        ]

    def identities(self) -> list[str]:
        return list(self._by_identity.keys())

    def __contains__(self, identity: object) -> bool:
        return identity in self._by_identity

    def __len__(self) -> int:
        return len(self._by_identity)
