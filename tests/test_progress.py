"""Tests for dyadikos.core.progress – unlock rules and progress persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

import pytest

from dyadikos.core.progress import (
    PROGRESS_STORAGE_KEY,
    FileKeyValueStore,
    ProgressStore,
    ProgressTracker,
    PuzzleStatus,
)
from dyadikos.core.puzzles import puzzles_for_sides
from dyadikos.core.shapes import ShapeLevel


# ---------------------------------------------------------------------------
# Helpers and fixtures
# ---------------------------------------------------------------------------

class DictStore:
    """In-memory key-value store that can be told to fail."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("read failed")
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("write failed")
        self.writes += 1
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("remove failed")
        self.data.pop(key, None)


SHAPES = [ShapeLevel(4, "Square"), ShapeLevel(5, "Pentagon"), ShapeLevel(6, "Hexagon")]


@pytest.fixture()
def kv() -> DictStore:
    return DictStore()


@pytest.fixture()
def tracker(kv: DictStore) -> ProgressTracker:
    return ProgressTracker(ProgressStore(kv), SHAPES)


def _complete_shape(tracker: ProgressTracker, sides: int) -> None:
    for puzzle in puzzles_for_sides(sides):
        tracker.mark_puzzle_complete(puzzle.id)


def _saved(kv: DictStore) -> list:
    return json.loads(kv.data[PROGRESS_STORAGE_KEY])


# ---------------------------------------------------------------------------
# ProgressStore – load / save contract
# ---------------------------------------------------------------------------

class TestProgressStore:
    def test_absent_record_is_empty(self, kv: DictStore):
        assert ProgressStore(kv).load() == set()

    def test_loads_array(self, kv: DictStore):
        kv.data[PROGRESS_STORAGE_KEY] = '["4-001","4-002"]'
        assert ProgressStore(kv).load() == {"4-001", "4-002"}

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', '"4-001"', "42", ""])
    def test_malformed_record_is_empty(self, kv: DictStore, raw: str):
        kv.data[PROGRESS_STORAGE_KEY] = raw
        assert ProgressStore(kv).load() == set()

    def test_deeply_nested_record_is_empty(self, kv: DictStore):
        kv.data[PROGRESS_STORAGE_KEY] = "[" * 100000 + "]" * 100000
        assert ProgressStore(kv).load() == set()

    def test_undecodable_record_is_empty(self, kv: DictStore, monkeypatch: pytest.MonkeyPatch):
        def _bad_read(key: str) -> str:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        monkeypatch.setattr(kv, "get_item", _bad_read)
        assert ProgressStore(kv).load() == set()

    def test_non_string_entries_dropped(self, kv: DictStore):
        kv.data[PROGRESS_STORAGE_KEY] = '["4-001", 3, null]'
        assert ProgressStore(kv).load() == {"4-001"}

    def test_read_failure_is_empty(self, kv: DictStore):
        kv.fail_reads = True
        assert ProgressStore(kv).load() == set()

    def test_write_failure_swallowed(self, kv: DictStore):
        kv.fail_writes = True
        store = ProgressStore(kv)
        store.save(["4-001"])
        store.clear()
        assert PROGRESS_STORAGE_KEY not in kv.data

    def test_save_writes_json_array(self, kv: DictStore):
        ProgressStore(kv).save(["4-001", "4-002"])
        assert _saved(kv) == ["4-001", "4-002"]

    def test_custom_key(self, kv: DictStore):
        store = ProgressStore(kv, key="other")
        store.save(["5-001"])
        assert store.key == "other"
        assert "other" in kv.data


# ---------------------------------------------------------------------------
# FileKeyValueStore
# ---------------------------------------------------------------------------

class TestFileKeyValueStore:
    def test_round_trip(self, tmp_path: Path):
        store = FileKeyValueStore(tmp_path / "data")
        assert store.get_item("k") is None
        store.set_item("k", "[]")
        assert store.get_item("k") == "[]"
        assert (tmp_path / "data" / "k.json").exists()

    def test_remove(self, tmp_path: Path):
        store = FileKeyValueStore(tmp_path)
        store.set_item("k", "[]")
        store.remove_item("k")
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_default_dir_under_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert FileKeyValueStore().base_dir == tmp_path / ".dyadikos"

    def test_tracker_survives_restart(self, tmp_path: Path):
        first = ProgressTracker(ProgressStore(FileKeyValueStore(tmp_path)), SHAPES)
        first.mark_puzzle_complete("4-001")
        second = ProgressTracker(ProgressStore(FileKeyValueStore(tmp_path)), SHAPES)
        assert second.completed_puzzle_ids == {"4-001"}

    def test_undecodable_file_hydrates_empty(self, tmp_path: Path):
        (tmp_path / f"{PROGRESS_STORAGE_KEY}.json").write_bytes(b'["4-001"\xff]')
        tracker = ProgressTracker(ProgressStore(FileKeyValueStore(tmp_path)), SHAPES)
        assert tracker.is_hydrated
        assert tracker.completed_puzzle_ids == frozenset()

    def test_deeply_nested_file_hydrates_empty(self, tmp_path: Path):
        (tmp_path / f"{PROGRESS_STORAGE_KEY}.json").write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        tracker = ProgressTracker(ProgressStore(FileKeyValueStore(tmp_path)), SHAPES)
        assert tracker.completed_puzzle_ids == frozenset()


# ---------------------------------------------------------------------------
# ProgressTracker – mutations
# ---------------------------------------------------------------------------

class TestMarkAndReset:
    def test_mark_complete(self, tracker: ProgressTracker, kv: DictStore):
        tracker.mark_puzzle_complete("4-001")
        assert tracker.is_puzzle_complete("4-001")
        assert _saved(kv) == ["4-001"]

    def test_mark_idempotent(self, tracker: ProgressTracker, kv: DictStore):
        tracker.mark_puzzle_complete("4-001")
        writes = kv.writes
        tracker.mark_puzzle_complete("4-001")
        assert tracker.completed_puzzle_ids == {"4-001"}
        assert kv.writes == writes

    def test_saves_full_set_in_order(self, tracker: ProgressTracker, kv: DictStore):
        tracker.mark_puzzle_complete("4-002")
        tracker.mark_puzzle_complete("4-001")
        assert _saved(kv) == ["4-002", "4-001"]

    def test_hydrates_saved_record(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001","4-002"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES)
        assert tracker.completed_puzzle_ids == {"4-001", "4-002"}

    def test_reset(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001","4-002"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES)
        tracker.reset_progress()
        assert tracker.completed_puzzle_ids == frozenset()
        assert PROGRESS_STORAGE_KEY not in kv.data
        assert tracker.is_puzzle_unlocked(4, 1)
        assert not tracker.is_puzzle_unlocked(4, 2)
        assert not tracker.is_shape_unlocked(5)

    def test_write_failure_keeps_memory_state(self, tracker: ProgressTracker, kv: DictStore):
        kv.fail_writes = True
        tracker.mark_puzzle_complete("4-001")
        assert tracker.is_puzzle_complete("4-001")
        assert tracker.is_puzzle_unlocked(4, 2)

    def test_snapshot_is_immutable(self, tracker: ProgressTracker):
        snapshot = tracker.completed_puzzle_ids
        tracker.mark_puzzle_complete("4-001")
        assert "4-001" not in snapshot


# ---------------------------------------------------------------------------
# ProgressTracker – hydration gate
# ---------------------------------------------------------------------------

class TestHydration:
    def test_no_write_before_hydration(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES, hydrate=False)
        assert not tracker.is_hydrated
        tracker.mark_puzzle_complete("4-002")
        assert tracker.is_puzzle_complete("4-002")
        assert _saved(kv) == ["4-001"]

    def test_hydration_merges_pending_marks(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES, hydrate=False)
        tracker.mark_puzzle_complete("4-002")
        tracker.hydrate()
        assert tracker.completed_puzzle_ids == {"4-001", "4-002"}
        assert set(_saved(kv)) == {"4-001", "4-002"}

    def test_hydration_without_pending_does_not_write(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        ProgressTracker(ProgressStore(kv), SHAPES)
        assert kv.writes == 0

    def test_hydrate_runs_once(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES)
        kv.data[PROGRESS_STORAGE_KEY] = '["5-001"]'
        tracker.hydrate()
        assert tracker.completed_puzzle_ids == {"4-001"}

    def test_queries_before_hydration(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES, hydrate=False)
        assert tracker.is_shape_unlocked(4)
        assert not tracker.is_puzzle_unlocked(4, 2)

    def test_reset_before_hydration_wins(self):
        kv = DictStore({PROGRESS_STORAGE_KEY: '["4-001"]'})
        tracker = ProgressTracker(ProgressStore(kv), SHAPES, hydrate=False)
        tracker.reset_progress()
        tracker.hydrate()
        assert tracker.completed_puzzle_ids == frozenset()

    def test_unreadable_store_hydrates_empty(self):
        kv = DictStore()
        kv.fail_reads = True
        tracker = ProgressTracker(ProgressStore(kv), SHAPES)
        assert tracker.is_hydrated
        assert tracker.completed_puzzle_ids == frozenset()


# ---------------------------------------------------------------------------
# ProgressTracker – unlock rules
# ---------------------------------------------------------------------------

class TestUnlockRules:
    def test_first_shape_unlocked(self, tracker: ProgressTracker):
        assert tracker.is_shape_unlocked(4)
        assert not tracker.is_shape_unlocked(5)

    def test_next_shape_unlocks_when_previous_complete(self, tracker: ProgressTracker):
        tracker.mark_puzzle_complete("4-001")
        tracker.mark_puzzle_complete("4-002")
        assert not tracker.is_shape_unlocked(5)
        tracker.mark_puzzle_complete("4-003")
        assert tracker.is_shape_complete(4)
        assert tracker.is_shape_unlocked(5)
        assert not tracker.is_shape_unlocked(6)

    def test_unknown_shape_locked(self, tracker: ProgressTracker):
        assert not tracker.is_shape_unlocked(7)
        assert not tracker.is_puzzle_unlocked(7, 1)

    def test_puzzles_unlock_sequentially(self, tracker: ProgressTracker):
        assert tracker.is_puzzle_unlocked(4, 1)
        assert not tracker.is_puzzle_unlocked(4, 2)
        tracker.mark_puzzle_complete("4-001")
        assert tracker.is_puzzle_unlocked(4, 2)
        assert not tracker.is_puzzle_unlocked(4, 3)

    def test_puzzle_zero_or_less_unlocked_in_open_shape(self, tracker: ProgressTracker):
        assert tracker.is_puzzle_unlocked(4, 0)

    def test_puzzle_in_locked_shape(self, tracker: ProgressTracker):
        tracker.mark_puzzle_complete("6-002")
        assert not tracker.is_puzzle_unlocked(6, 3)

    def test_puzzle_three_of_hexagon(self, tracker: ProgressTracker):
        _complete_shape(tracker, 4)
        _complete_shape(tracker, 5)
        assert tracker.is_shape_unlocked(6)
        assert not tracker.is_puzzle_unlocked(6, 3)
        tracker.mark_puzzle_complete("6-002")
        assert tracker.is_puzzle_unlocked(6, 3)

    def test_unlock_is_monotonic(self, tracker: ProgressTracker):
        cases = [(s.sides, n) for s in SHAPES for n in range(1, 8)]
        for puzzle in puzzles_for_sides(4) + puzzles_for_sides(5):
            before = {case for case in cases if tracker.is_puzzle_unlocked(*case)}
            shapes_before = {s.sides for s in SHAPES if tracker.is_shape_unlocked(s.sides)}
            tracker.mark_puzzle_complete(puzzle.id)
            assert before <= {case for case in cases if tracker.is_puzzle_unlocked(*case)}
            assert shapes_before <= {s.sides for s in SHAPES if tracker.is_shape_unlocked(s.sides)}

    def test_unlock_all(self, kv: DictStore):
        tracker = ProgressTracker(ProgressStore(kv), SHAPES, unlock_all=True)
        assert tracker.is_shape_unlocked(6)
        assert tracker.is_puzzle_unlocked(6, 7)
        assert not tracker.is_puzzle_complete("6-007")
        assert not tracker.is_shape_unlocked(9)


# ---------------------------------------------------------------------------
# ProgressTracker – status helpers and observers
# ---------------------------------------------------------------------------

class TestStatus:
    def test_puzzle_status(self, tracker: ProgressTracker):
        tracker.mark_puzzle_complete("4-001")
        assert tracker.puzzle_status(4, 1) is PuzzleStatus.COMPLETED
        assert tracker.puzzle_status(4, 2) is PuzzleStatus.UNLOCKED
        assert tracker.puzzle_status(4, 3) is PuzzleStatus.LOCKED

    def test_shape_status(self, tracker: ProgressTracker):
        _complete_shape(tracker, 4)
        assert tracker.shape_status(4) is PuzzleStatus.COMPLETED
        assert tracker.shape_status(5) is PuzzleStatus.UNLOCKED
        assert tracker.shape_status(6) is PuzzleStatus.LOCKED

    def test_completed_count(self, tracker: ProgressTracker):
        tracker.mark_puzzle_complete("5-001")
        tracker.mark_puzzle_complete("5-003")
        tracker.mark_puzzle_complete("unrelated")
        assert tracker.completed_count(5) == 2

    def test_shape_with_no_puzzles_never_complete(self, tracker: ProgressTracker):
        assert not tracker.is_shape_complete(1)

    def test_current_puzzle(self, tracker: ProgressTracker):
        assert tracker.current_puzzle(4) == 1
        tracker.mark_puzzle_complete("4-001")
        assert tracker.current_puzzle(4) == 2
        _complete_shape(tracker, 4)
        assert tracker.current_puzzle(4) is None
        assert tracker.current_puzzle(6) is None

    def test_subscribe_and_unsubscribe(self, tracker: ProgressTracker):
        calls = []
        unsubscribe = tracker.subscribe(lambda t: calls.append(len(t.completed_puzzle_ids)))
        tracker.mark_puzzle_complete("4-001")
        tracker.mark_puzzle_complete("4-001")
        tracker.reset_progress()
        unsubscribe()
        tracker.mark_puzzle_complete("4-002")
        assert calls == [1, 0]

    def test_shapes_property_is_copy(self, tracker: ProgressTracker):
        tracker.shapes.clear()
        assert [s.sides for s in tracker.shapes] == [4, 5, 6]
