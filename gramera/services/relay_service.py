"""
Point-to-point relay for chat messages and typing indicators.

Fire-and-forget: a recipient with no live session means the event is
dropped. Nothing is queued, retried or acknowledged.
"""

from __future__ import annotations

import logging
from typing import Any

from gramera.core.registry import ConnectionRegistry
from gramera.schemas.realtime import IncomingMessage, ServerEvent

logger = logging.getLogger(__name__)


class MessageRelay:
    """Reads the registry; never mutates it."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def relay_message(
        self,
        sender_identity: str,
        recipient_identity: str,
        content: Any,
    ) -> bool:
        """
        Deliver ``{senderIdentity, content}`` to the recipient's current session.
        Returns False when the recipient is offline or the send failed.
        """
        payload = IncomingMessage(sender_identity=sender_identity, content=content)
        return await self._forward(
            recipient_identity,
            ServerEvent.message,
            payload.model_dump(by_alias=True),
        )

    async def relay_typing(
        self,
        sender_identity: str,
        recipient_identity: str,
        starting: bool,
    ) -> bool:
        event = ServerEvent.typing_start if starting else ServerEvent.typing_stop
        return await self._forward(recipient_identity, event, sender_identity)

    async def _forward(self, recipient_identity: str, event: ServerEvent, data: Any) -> bool:
        session = self._registry.find(recipient_identity)
        if session is None:
            logger.debug(
                "Dropping %s: recipient %s is offline",
                event.value,
                recipient_identity,
            )
            return False

        try:
            await session.send(event.value, data)
        except Exception as exc:
            logger.warning(
                "Failed to relay %s to identity=%s session_id=%s: %s",
                event.value,
                recipient_identity,
                session.session_id,
                exc,
            )
            return False
        return True
