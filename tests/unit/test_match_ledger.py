"""Unit tests for MatchLedger mirrored entries."""

from __future__ import annotations

from peerqueue.server.match_ledger import MatchLedger
from peerqueue.server.waiting_room import Participant


def _pair(ledger, a="a1", b="b1", created_at=100.0):
    return ledger.pair(
        Participant(a, "Alice", created_at),
        Participant(b, "Bob", created_at),
        created_at=created_at,
    )


class TestMatchLedger:
    def test_pair_creates_mirrored_entries(self):
        ledger = MatchLedger()
        first, second = _pair(ledger)

        assert ledger.get("a1") == first
        assert ledger.get("b1") == second
        assert first.partner_id == "b1"
        assert first.partner_name == "Bob"
        assert second.partner_id == "a1"
        assert second.partner_name == "Alice"
        assert first.created_at == second.created_at == 100.0
        assert len(ledger) == 2

    def test_get_unknown_returns_none(self):
        assert MatchLedger().get("nobody") is None

    def test_confirm_removes_only_caller(self):
        ledger = MatchLedger()
        _pair(ledger)

        removed = ledger.confirm("a1")

        assert removed.owner_id == "a1"
        assert ledger.get("a1") is None
        assert ledger.get("b1").partner_id == "a1"

    def test_remove_absent_is_noop(self):
        ledger = MatchLedger()
        _pair(ledger)
        assert ledger.remove("zzz") is None
        assert len(ledger) == 2

    def test_dissolve_removes_both_sides(self):
        ledger = MatchLedger()
        _pair(ledger)

        removed = ledger.dissolve("b1")

        assert {p.owner_id for p in removed} == {"a1", "b1"}
        assert len(ledger) == 0

    def test_dissolve_keeps_partner_rematched_elsewhere(self):
        ledger = MatchLedger()
        _pair(ledger, "a1", "b1", created_at=100.0)
        # b1 confirmed, rejoined and was paired with c1
        ledger.confirm("b1")
        _pair(ledger, "b1", "c1", created_at=200.0)

        removed = ledger.dissolve("a1")

        assert [p.owner_id for p in removed] == ["a1"]
        assert ledger.get("b1").partner_id == "c1"

    def test_dissolve_unknown_returns_empty(self):
        assert MatchLedger().dissolve("nobody") == []

    def test_evict_older_than(self):
        ledger = MatchLedger()
        _pair(ledger, "a1", "b1", created_at=100.0)
        _pair(ledger, "c1", "d1", created_at=300.0)

        evicted = ledger.evict_older_than(200.0)

        assert {p.owner_id for p in evicted} == {"a1", "b1"}
        assert "a1" not in ledger
        assert "b1" not in ledger
        assert ledger.get("c1").partner_id == "d1"
