from __future__ import annotations

import enum
import json
import logging
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Protocol, Sequence, Set

from dyadikos.core.puzzles import puzzle_count_for_sides, puzzle_id
from dyadikos.core.shapes import ShapeLevel

logger = logging.getLogger(__name__)

PROGRESS_STORAGE_KEY = "dyadikos-completed-puzzles-v1"


class PuzzleStatus(enum.Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


class KeyValueStore(Protocol):
    """Durable string storage. Reads may raise ``OSError`` or ``ValueError``."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class FileKeyValueStore:
    """One file per key under ``base_dir`` (default ``~/.dyadikos``)."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path.home() / ".dyadikos"

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path_for(self, key: str) -> Path:
        return self._base_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._path_for(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)


class ProgressStore:
    """Reads and writes the completed-puzzle record. Never raises.

    The record is a JSON array of puzzle ids. Anything else reads as no
    progress, and failed writes are logged and dropped.
    """

    def __init__(self, kv_store: KeyValueStore, key: str = PROGRESS_STORAGE_KEY) -> None:
        self._kv_store = kv_store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Set[str]:
        try:
            raw = self._kv_store.get_item(self._key)
        except (OSError, ValueError) as e:
            logger.warning("Could not read progress record %s: %s", self._key, e)
            return set()
        if not raw:
            return set()
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning("Ignoring malformed progress record %s: %s", self._key, e)
            return set()
        if not isinstance(payload, list):
            logger.warning("Ignoring progress record %s: expected a JSON array", self._key)
            return set()
        return {item for item in payload if isinstance(item, str)}

    def save(self, puzzle_ids: Iterable[str]) -> None:
        try:
            self._kv_store.set_item(self._key, json.dumps(list(puzzle_ids)))
        except OSError as e:
            logger.warning("Could not save progress record %s: %s", self._key, e)

    def clear(self) -> None:
        try:
            self._kv_store.remove_item(self._key)
        except OSError as e:
            logger.warning("Could not remove progress record %s: %s", self._key, e)


ProgressListener = Callable[["ProgressTracker"], None]


class ProgressTracker:
    """In-memory completed set plus the unlock rules derived from it.

    Puzzles move Locked -> Unlocked -> Completed. A shape opens once the
    previous shape is fully complete; puzzles inside a shape open one by one.
    Writes are held back until :meth:`hydrate` has run so a fresh empty set
    never overwrites saved progress.
    """

    def __init__(
        self,
        store: ProgressStore,
        shapes: Sequence[ShapeLevel],
        *,
        unlock_all: bool = False,
        hydrate: bool = True,
    ) -> None:
        self._store = store
        self._shapes = list(shapes)
        self._unlock_all = unlock_all
        # dict keeps insertion order for the persisted array
        self._completed: Dict[str, None] = {}
        self._hydrated = False
        self._listeners: List[ProgressListener] = []
        if hydrate:
            self.hydrate()

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    @property
    def shapes(self) -> List[ShapeLevel]:
        return list(self._shapes)

    @property
    def completed_puzzle_ids(self) -> FrozenSet[str]:
        return frozenset(self._completed)

    def hydrate(self) -> None:
        """Load the saved record once, keeping anything completed meanwhile."""
        if self._hydrated:
            return
        loaded = self._store.load()
        pending = [key for key in self._completed if key not in loaded]
        merged: Dict[str, None] = dict.fromkeys(sorted(loaded))
        merged.update(self._completed)
        self._completed = merged
        self._hydrated = True
        logger.info("Loaded %d completed puzzles", len(loaded))
        if pending:
            self._persist()
        self._notify()

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Call ``listener`` after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def mark_puzzle_complete(self, puzzle_id_: str) -> None:
        if puzzle_id_ in self._completed:
            return
        self._completed[puzzle_id_] = None
        logger.debug("Puzzle %s completed", puzzle_id_)
        self._persist()
        self._notify()

    def reset_progress(self) -> None:
        """Forget all progress and delete the saved record."""
        self._completed = {}
        # A later hydrate must not bring the deleted record back.
        self._hydrated = True
        self._store.clear()
        logger.info("Progress reset")
        self._notify()

    def is_puzzle_complete(self, puzzle_id_: str) -> bool:
        return puzzle_id_ in self._completed

    def completed_count(self, sides: int) -> int:
        return sum(
            1
            for number in range(1, puzzle_count_for_sides(sides) + 1)
            if puzzle_id(sides, number) in self._completed
        )

    def is_shape_complete(self, sides: int) -> bool:
        total = puzzle_count_for_sides(sides)
        return total > 0 and self.completed_count(sides) == total

    def is_shape_unlocked(self, sides: int) -> bool:
        index = self._shape_index(sides)
        if index < 0:
            return False
        if self._unlock_all or index == 0:
            return True
        return self.is_shape_complete(self._shapes[index - 1].sides)

    def is_puzzle_unlocked(self, sides: int, puzzle_number: int) -> bool:
        if not self.is_shape_unlocked(sides):
            return False
        if self._unlock_all or puzzle_number <= 1:
            return True
        return puzzle_id(sides, puzzle_number - 1) in self._completed

    def puzzle_status(self, sides: int, puzzle_number: int) -> PuzzleStatus:
        if puzzle_id(sides, puzzle_number) in self._completed:
            return PuzzleStatus.COMPLETED
        if self.is_puzzle_unlocked(sides, puzzle_number):
            return PuzzleStatus.UNLOCKED
        return PuzzleStatus.LOCKED

    def shape_status(self, sides: int) -> PuzzleStatus:
        if self.is_shape_complete(sides):
            return PuzzleStatus.COMPLETED
        if self.is_shape_unlocked(sides):
            return PuzzleStatus.UNLOCKED
        return PuzzleStatus.LOCKED

    def current_puzzle(self, sides: int) -> Optional[int]:
        """Number of the first playable, unfinished puzzle of a shape."""
        if not self.is_shape_unlocked(sides):
            return None
        for number in range(1, puzzle_count_for_sides(sides) + 1):
            if puzzle_id(sides, number) not in self._completed:
                return number if self.is_puzzle_unlocked(sides, number) else None
        return None

    def _shape_index(self, sides: int) -> int:
        for idx, shape in enumerate(self._shapes):
            if shape.sides == sides:
                return idx
        return -1

    def _persist(self) -> None:
        if not self._hydrated:
            return
        self._store.save(self._completed)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
