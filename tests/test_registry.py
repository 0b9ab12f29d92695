"""
ConnectionRegistry tests.

Verifies that:
- Each identity maps to at most one session, the most recent one
- Closing a superseded session never evicts the newer binding
- Removal of an unknown session is a no-op
"""

from gramera.core.registry import ConnectionRegistry, RegistryEntry


def test_find_unknown_identity_is_absent(registry: ConnectionRegistry):
    assert registry.find("ghost") is None
    assert len(registry) == 0


def test_upsert_last_writer_wins(registry, make_session):
    sessions = [make_session(f"s{i}") for i in range(5)]
    for session in sessions:
        registry.upsert("alice", session)

    assert registry.find("alice") is sessions[-1]
    assert len(registry) == 1
    assert registry.snapshot() == [RegistryEntry("alice", sessions[-1])]


def test_upsert_sequence_keeps_one_entry_per_identity(registry, make_session):
    s1, s2, s3 = make_session("s1"), make_session("s2"), make_session("s3")
    registry.upsert("alice", s1)
    registry.upsert("bob", s2)
    registry.upsert("alice", s3)
    registry.upsert("bob", s2)

    identities = [entry.identity for entry in registry.snapshot()]
    assert sorted(identities) == ["alice", "bob"]
    assert registry.find("alice") is s3
    assert registry.find("bob") is s2


def test_upsert_same_pair_is_idempotent(registry, make_session):
    s1 = make_session("s1")
    registry.upsert("alice", s1)
    registry.upsert("alice", s1)

    assert registry.snapshot() == [RegistryEntry("alice", s1)]


def test_churn_removes_only_closed_session(registry, make_session):
    s1, s2 = make_session("s1"), make_session("s2")
    registry.upsert("alice", s1)
    registry.upsert("bob", s2)

    assert registry.remove_by_session(s1) == "alice"

    assert registry.find("alice") is None
    assert registry.find("bob") is s2


def test_reidentify_then_close_old_session_keeps_entry(registry, make_session):
    s1, s2 = make_session("s1"), make_session("s2")
    registry.upsert("alice", s1)
    registry.upsert("alice", s2)
    assert registry.find("alice") is s2

    assert registry.remove_by_session(s1) is None
    assert registry.find("alice") is s2

    assert registry.remove_by_session(s2) == "alice"
    assert registry.find("alice") is None


def test_session_reidentifying_as_other_identity_drops_old_entry(registry, make_session):
    s1 = make_session("s1")
    registry.upsert("alice", s1)
    registry.upsert("alice-2", s1)

    assert "alice" not in registry
    assert registry.find("alice-2") is s1
    assert len(registry) == 1


def test_remove_unknown_session_is_noop(registry, make_session):
    s1, stranger = make_session("s1"), make_session("stranger")
    registry.upsert("alice", s1)

    assert registry.remove_by_session(stranger) is None
    assert registry.remove_by_session(stranger) is None
    assert registry.find("alice") is s1


def test_remove_twice_does_not_touch_other_entries(registry, make_session):
    s1, s2 = make_session("s1"), make_session("s2")
    registry.upsert("alice", s1)
    registry.upsert("bob", s2)

    registry.remove_by_session(s1)
    registry.remove_by_session(s1)

    assert registry.identities() == ["bob"]


def test_snapshot_is_a_copy(registry, make_session):
    s1 = make_session("s1")
    registry.upsert("alice", s1)
    snap = registry.snapshot()

    registry.remove_by_session(s1)

    assert snap == [RegistryEntry("alice", s1)]
    assert registry.snapshot() == []
