"""
Pytest configuration and shared fixtures for the Gramera realtime tests.
"""

from __future__ import annotations

import pytest

from gramera.core.registry import ConnectionRegistry
from gramera.core.session import Session
from gramera.services.presence_service import PresenceService
from gramera.services.relay_service import MessageRelay
from tests.mocks.redis_mocks import FakeRedis
from tests.mocks.websocket_mocks import FakeTransport


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def presence(registry: ConnectionRegistry) -> PresenceService:
    return PresenceService(registry)


@pytest.fixture
def relay(registry: ConnectionRegistry) -> MessageRelay:
    return MessageRelay(registry)


@pytest.fixture
def make_session():
    """Build a bare Session with a FakeTransport and a readable id."""
    def _make(session_id: str, fail: bool = False) -> Session:
        return Session(FakeTransport(fail=fail), session_id=session_id)

    return _make


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
