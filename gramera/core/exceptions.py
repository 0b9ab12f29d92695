"""
Exception types for the relay and the suggestion client.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for errors raised inside the real-time relay."""


class MalformedEventError(RelayError):
    """
    An inbound frame could not be turned into a known event.

    Raised by the frame parser and caught by the WebSocket dispatch loop;
    the frame is dropped and the connection stays open.
    """

    def __init__(self, message: str, raw: object = None) -> None:
        super().__init__(message)
        self.raw = raw


class SuggestionServiceError(Exception):
    """The external suggestion API failed or returned an unusable reply."""
