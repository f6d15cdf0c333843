"""Tests for HistoryStore: MRU ordering, capacity, persistence."""

from __future__ import annotations

from scrcpyhub.core.history import HistoryStore, is_endpoint


class TestHistoryStore:
    def test_rejects_non_endpoint(self, history):
        assert history.add("R58M123ABC") is False
        assert history.records == []

    def test_most_recent_first(self, history):
        history.add("10.0.0.1:5555")
        history.add("10.0.0.2:5555")
        assert history.records == ["10.0.0.2:5555", "10.0.0.1:5555"]

    def test_re_add_moves_to_front_without_duplicate(self, history):
        history.add("10.0.0.1:5555")
        history.add("10.0.0.2:5555")
        history.add("10.0.0.1:5555")
        assert history.records == ["10.0.0.1:5555", "10.0.0.2:5555"]

    def test_capacity(self, history):
        for i in range(15):
            history.add(f"10.0.0.{i}:5555")
            assert len(history) <= HistoryStore.N_RECENT_RECORDS
        assert len(history) == 10
        assert history.records[0] == "10.0.0.14:5555"
        assert "10.0.0.4:5555" not in history.records

    def test_persisted(self, kvm, history):
        history.add("10.0.0.1:5555")
        assert HistoryStore(kvm).records == ["10.0.0.1:5555"]

    def test_clear(self, kvm, history):
        history.add("10.0.0.1:5555")
        history.clear()
        assert history.records == []
        assert HistoryStore(kvm).records == []

    def test_persisted_duplicates_collapsed(self, kvm):
        kvm.set(HistoryStore.KEY, ["10.0.0.1:5555", "10.0.0.2:5555", "10.0.0.1:5555", "serial"])
        assert HistoryStore(kvm).records == ["10.0.0.1:5555", "10.0.0.2:5555"]

    def test_corrupt_persisted_value_ignored(self, kvm):
        kvm.set(HistoryStore.KEY, {"not": "a list"})
        assert HistoryStore(kvm).records == []


def test_is_endpoint():
    assert is_endpoint("192.168.1.4:5555")
    assert not is_endpoint("emulator5554")
