"""Unit tests for SessionRegistry: host assignment, host transfer and ordering."""

from __future__ import annotations

from review_bomber.configurations.configuration_constants import CritiqueIntensity
from review_bomber.server.session_registry import SessionRegistry


def _registry_with(names):
    registry = SessionRegistry()
    for i, name in enumerate(names):
        registry.add(f"c{i}")
        registry.set_name(f"c{i}", name)
    return registry


class TestHostFlag:
    def test_first_connection_becomes_host(self):
        registry = SessionRegistry()
        first = registry.add("c0")
        second = registry.add("c1")

        assert first.is_host
        assert not second.is_host
        assert registry.host() is first

    def test_host_transfers_when_host_leaves(self):
        registry = _registry_with(["alice", "bob", "carol"])

        registry.remove("c0")

        hosts = [s for s in registry if s.is_host]
        assert len(hosts) == 1
        assert hosts[0].connection_id in ("c1", "c2")

    def test_non_host_leaving_keeps_host(self):
        registry = _registry_with(["alice", "bob"])
        registry.remove("c1")
        assert registry.host().connection_id == "c0"

    def test_host_cleared_when_registry_empties(self):
        registry = SessionRegistry()
        registry.add("c0")
        registry.remove("c0")

        assert registry.host() is None
        assert len(registry) == 0

        # Next connection picks the flag back up
        assert registry.add("c1").is_host

    def test_removing_unknown_connection_is_noop(self):
        registry = _registry_with(["alice"])
        assert registry.remove("missing") is None
        assert len(registry) == 1

    def test_duplicate_add_returns_existing(self):
        registry = SessionRegistry()
        session = registry.add("c0")
        assert registry.add("c0") is session
        assert len(registry) == 1


class TestOrderedSnapshot:
    def test_sorted_by_name(self):
        registry = _registry_with(["carol", "alice", "bob"])
        names = [s.name for s in registry.ordered_snapshot()]
        assert names == ["alice", "bob", "carol"]

    def test_unnamed_sorts_first_and_ties_are_stable(self):
        registry = SessionRegistry()
        registry.add("c0")
        registry.add("c1")
        registry.add("c2")
        registry.set_name("c2", "alice")

        ids = [s.connection_id for s in registry.ordered_snapshot()]
        assert ids == ["c0", "c1", "c2"]
        assert ids == [s.connection_id for s in registry.ordered_snapshot()]

    def test_duplicate_names_break_ties_by_connection_order(self):
        registry = _registry_with(["sam", "sam", "sam"])
        ids = [s.connection_id for s in registry.ordered_snapshot()]
        assert ids == ["c0", "c1", "c2"]

    def test_recomputed_on_membership_change(self):
        registry = _registry_with(["bob", "carol"])
        registry.add("c9")
        registry.set_name("c9", "alice")

        assert [s.name for s in registry.ordered_snapshot()] == ["alice", "bob", "carol"]

        registry.remove("c9")
        assert [s.name for s in registry.ordered_snapshot()] == ["bob", "carol"]


def test_reset_round_fields_clears_transient_state():
    registry = _registry_with(["alice"])
    session = registry.get("c0")
    session.blank_a = "x"
    session.blank_b = "y"
    session.assigned_entry_index = 3
    session.critique = CritiqueIntensity.Bad
    session.review_text = "awful"
    session.has_voted_this_entry = True
    session.has_submitted = True

    registry.reset_round_fields()

    assert session.blank_a == "" and session.blank_b == ""
    assert session.assigned_entry_index == -1
    assert session.critique == CritiqueIntensity.Average
    assert session.review_text == ""
    assert not session.has_voted_this_entry
    assert not session.has_submitted
    # Identity survives the reset
    assert session.name == "alice"
    assert session.is_host
