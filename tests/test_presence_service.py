"""
Session lifecycle tests.

Verifies that:
- identify upserts and broadcasts presence to every open session
- close removes the entry and rebroadcasts, exactly once
- a failing transport does not block the broadcast to others
"""

from gramera.core.session import SessionState
from gramera.services.presence_service import PresenceService
from tests.mocks.websocket_mocks import FakeTransport


def _presence_pairs(frame_data: list[dict]) -> list[tuple[str, str]]:
    return [(entry["identity"], entry["sessionId"]) for entry in frame_data]


async def test_open_session_is_connected_and_silent(presence: PresenceService):
    transport = FakeTransport()
    session = presence.open_session(transport)

    assert session.state is SessionState.connected
    assert session.session_id
    assert transport.frames == []
    assert presence.open_sessions == [session]


async def test_session_ids_are_unique(presence: PresenceService):
    ids = {presence.open_session(FakeTransport()).session_id for _ in range(50)}
    assert len(ids) == 50


async def test_identify_broadcasts_full_snapshot_to_all_sessions(presence: PresenceService):
    ta, tb, tc = FakeTransport(), FakeTransport(), FakeTransport()
    s1 = presence.open_session(ta, session_id="S1")
    s2 = presence.open_session(tb, session_id="S2")
    presence.open_session(tc, session_id="S3")  # never identifies

    await presence.identify(s1, "A")
    await presence.identify(s2, "B")

    for transport in (ta, tb, tc):
        latest = transport.events("presence-list")[-1]
        pairs = _presence_pairs(latest)
        assert sorted(pairs) == [("A", "S1"), ("B", "S2")]
        assert len(pairs) == len(set(pairs))

    assert s1.state is SessionState.identified
    assert s1.identity == "A"


async def test_reidentify_updates_entry(presence: PresenceService):
    s1 = presence.open_session(FakeTransport(), session_id="S1")
    s2 = presence.open_session(FakeTransport(), session_id="S2")

    await presence.identify(s1, "A")
    await presence.identify(s2, "A")

    assert presence.registry.find("A") is s2
    assert [(e.identity, e.session_id) for e in presence.presence_list()] == [("A", "S2")]

    await presence.close(s1)
    assert presence.registry.find("A") is s2

    await presence.close(s2)
    assert presence.registry.find("A") is None


async def test_close_removes_entry_and_rebroadcasts(presence: PresenceService):
    ta, tb = FakeTransport(), FakeTransport()
    s1 = presence.open_session(ta, session_id="S1")
    s2 = presence.open_session(tb, session_id="S2")
    await presence.identify(s1, "A")
    await presence.identify(s2, "B")

    await presence.close(s1)

    assert presence.registry.find("A") is None
    assert presence.registry.find("B") is s2
    assert _presence_pairs(tb.events("presence-list")[-1]) == [("B", "S2")]
    # Closed session receives nothing further
    assert len(ta.events("presence-list")) == 2


async def test_close_twice_is_idempotent(presence: PresenceService):
    ta, tb = FakeTransport(), FakeTransport()
    s1 = presence.open_session(ta, session_id="S1")
    s2 = presence.open_session(tb, session_id="S2")
    await presence.identify(s1, "A")
    await presence.identify(s2, "B")

    await presence.close(s1)
    broadcasts_after_first_close = len(tb.frames)
    await presence.close(s1)

    assert len(tb.frames) == broadcasts_after_first_close
    assert presence.registry.find("B") is s2
    assert s1.state is SessionState.closed


async def test_close_unidentified_session(presence: PresenceService):
    transport = FakeTransport()
    session = presence.open_session(transport)

    await presence.close(session)

    assert presence.open_sessions == []
    assert len(presence.registry) == 0


async def test_identify_on_closed_session_is_ignored(presence: PresenceService):
    session = presence.open_session(FakeTransport(), session_id="S1")
    await presence.close(session)

    await presence.identify(session, "A")

    assert presence.registry.find("A") is None
    assert session.state is SessionState.closed


async def test_broadcast_survives_failing_transport(presence: PresenceService):
    healthy = FakeTransport()
    broken = FakeTransport(fail=True)
    s_ok = presence.open_session(healthy, session_id="OK")
    presence.open_session(broken, session_id="BROKEN")

    await presence.identify(s_ok, "A")

    assert _presence_pairs(healthy.events("presence-list")[-1]) == [("A", "OK")]
    assert broken.frames == []
