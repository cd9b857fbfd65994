# tests/test_history_store.py
"""
Tests for the in-memory HistoryStore.
"""

import random

import pytest

from clipkeep.models.types import ClipboardSnapshot
from clipkeep.storage.history_store import HistoryStore, MAX_HISTORY_SIZE


def snap(content: str, t: float = 0.0) -> ClipboardSnapshot:
    return ClipboardSnapshot(content=content, captured_at=t)


def contents(store: HistoryStore) -> list[str]:
    return [e.content for e in store.entries()]


@pytest.fixture
def store():
    return HistoryStore()


class TestInsert:
    """Insert ordering, dedup and eviction"""

    def test_default_capacity_is_fifty(self, store):
        assert store.capacity == MAX_HISTORY_SIZE == 50

    def test_most_recent_first(self, store):
        for i, c in enumerate(["a", "b", "c"]):
            store.insert(snap(c, i))
        assert contents(store) == ["c", "b", "a"]

    def test_duplicate_moves_to_front_without_growing(self, store):
        for i, c in enumerate(["a", "b", "c"]):
            store.insert(snap(c, i))
        assert store.insert(snap("b", 10)) is True
        assert contents(store) == ["b", "c", "a"]
        assert len(store) == 3
        assert store.latest().captured_at == 10

    def test_repeat_of_front_entry_refreshes_timestamp(self, store):
        store.insert(snap("a", 1))
        assert store.insert(snap("a", 2)) is True
        assert len(store) == 1
        assert store.latest().captured_at == 2

    def test_identical_reinsert_reports_no_change(self, store):
        store.insert(snap("a", 1))
        assert store.insert(snap("a", 1)) is False

    def test_content_equality_is_exact(self, store):
        store.insert(snap("Hello"))
        store.insert(snap("hello"))
        store.insert(snap("hello "))
        assert len(store) == 3

    def test_fifty_first_distinct_value_evicts_oldest(self, store):
        for i in range(51):
            store.insert(snap(f"item {i}", i))
        assert len(store) == 50
        assert "item 0" not in store
        assert contents(store)[0] == "item 50"
        assert contents(store)[-1] == "item 1"

    def test_reselected_entry_survives_eviction(self, store):
        for i, c in enumerate(["a", "b", "c"]):
            store.insert(snap(c, i))
        store.insert(snap("b", 3))
        for i in range(48):
            store.insert(snap(f"x{i}", 10 + i))
        assert len(store) == 50
        assert "a" not in store
        assert "b" in store
        assert "c" in store

    def test_invariants_hold_for_random_sequences(self):
        rng = random.Random(1234)
        store = HistoryStore()
        for step in range(2000):
            content = f"v{rng.randint(0, 80)}"
            store.insert(snap(content, step))
            items = contents(store)
            assert len(items) <= 50
            assert len(items) == len(set(items))
            assert items[0] == content

    def test_small_capacity(self):
        store = HistoryStore(capacity=2)
        for c in ["a", "b", "c"]:
            store.insert(snap(c))
        assert contents(store) == ["c", "b"]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryStore(capacity=0)


class TestQueries:
    """Read-only views and removal"""

    def test_entries_returns_copy(self, store):
        store.insert(snap("a"))
        view = store.entries()
        view.clear()
        assert len(store) == 1

    def test_get_by_index(self, store):
        store.insert(snap("a"))
        store.insert(snap("b"))
        assert store.get(0).content == "b"
        assert store.get(1).content == "a"
        assert store.get(2) is None
        assert store.get(-1) is None

    def test_latest_on_empty_store(self, store):
        assert store.latest() is None

    def test_remove_present(self, store):
        store.insert(snap("a"))
        store.insert(snap("b"))
        assert store.remove("a") is True
        assert contents(store) == ["b"]

    def test_remove_absent_is_noop(self, store):
        store.insert(snap("a"))
        assert store.remove("zzz") is False
        assert contents(store) == ["a"]

    def test_clear(self, store):
        store.insert(snap("a"))
        store.insert(snap("b"))
        assert store.clear() == 2
        assert len(store) == 0

    def test_search_is_case_insensitive(self, store):
        for c in ["Alpha", "beta", "ALPHABET"]:
            store.insert(snap(c))
        assert [e.content for e in store.search("alpha")] == ["ALPHABET", "Alpha"]

    def test_search_limit(self, store):
        for i in range(10):
            store.insert(snap(f"match {i}"))
        assert len(store.search("match", limit=3)) == 3


class TestRestore:
    """Wholesale replacement from a persisted sequence"""

    def test_restore_replaces_entries(self, store):
        store.insert(snap("old"))
        store.restore([snap("c"), snap("b"), snap("a")])
        assert contents(store) == ["c", "b", "a"]

    def test_restore_dedups_keeping_most_recent(self, store):
        store.restore([snap("a", 3), snap("b", 2), snap("a", 1)])
        assert contents(store) == ["a", "b"]
        assert store.get(0).captured_at == 3

    def test_restore_truncates_to_capacity(self, store):
        store.restore([snap(f"e{i}") for i in range(80)])
        assert len(store) == 50
        assert contents(store)[0] == "e0"
        assert contents(store)[-1] == "e49"

    def test_restore_drops_empty_content(self, store):
        store.restore([snap(""), snap("a")])
        assert contents(store) == ["a"]

    def test_restore_empty(self, store):
        store.insert(snap("a"))
        store.restore([])
        assert len(store) == 0
