from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from dyadikos.core.binary import (
    BinaryValue,
    current_value,
    has_reached_goal,
    is_chord_complete,
    required_distances,
)
from dyadikos.core.geometry import Chord
from dyadikos.core.puzzles import Puzzle

logger = logging.getLogger(__name__)


class DrawOutcome(enum.Enum):
    ADDED = "added"
    SOLVED = "solved"
    DUPLICATE = "duplicate"
    INVALID = "invalid"
    FROZEN = "frozen"

    @property
    def accepted(self) -> bool:
        return self in (DrawOutcome.ADDED, DrawOutcome.SOLVED)


@dataclass(frozen=True)
class ChordState:
    """A drawn chord and whether its whole distance class is drawn."""

    chord: Chord
    complete: bool


class PuzzleSession:
    """One attempt at a puzzle: the drawn chords and the success flag.

    The board freezes on the first success. Later connects are refused, so
    the value shown at success is the value that stays on screen.
    """

    def __init__(self, puzzle: Puzzle, on_solved: Optional[Callable[[Puzzle], None]] = None) -> None:
        self._puzzle = puzzle
        self._on_solved = on_solved
        self._drawn: List[Chord] = []
        self._is_success = False

    @property
    def puzzle(self) -> Puzzle:
        return self._puzzle

    @property
    def sides(self) -> int:
        return self._puzzle.sides

    @property
    def drawn(self) -> List[Chord]:
        """Chords in the order they were drawn."""
        return list(self._drawn)

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def value(self) -> BinaryValue:
        return current_value(self._drawn, self.sides)

    def connect(self, a: int, b: int) -> DrawOutcome:
        """Try to draw a chord from vertex ``a`` to vertex ``b``."""
        if self._is_success:
            return DrawOutcome.FROZEN
        if a == b or not (0 <= a < self.sides and 0 <= b < self.sides):
            return DrawOutcome.INVALID
        chord = Chord(a, b)
        if chord in self._drawn:
            return DrawOutcome.DUPLICATE
        self._drawn.append(chord)

        if not has_reached_goal(self._drawn, self._puzzle.goal_number, self.sides):
            return DrawOutcome.ADDED
        self._is_success = True
        logger.info("Puzzle %s solved with %d chords", self._puzzle.id, len(self._drawn))
        if self._on_solved is not None:
            self._on_solved(self._puzzle)
        return DrawOutcome.SOLVED

    def chord_states(self) -> List[ChordState]:
        drawn = set(self._drawn)
        return [ChordState(chord=c, complete=is_chord_complete(c, drawn, self.sides)) for c in self._drawn]

    def required_distances(self) -> List[int]:
        return required_distances(self._puzzle.goal_number, self.sides)

    def reset(self) -> None:
        """Start the attempt over with an empty board."""
        self._drawn = []
        self._is_success = False
