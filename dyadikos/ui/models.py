"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from dyadikos.core.progress import ProgressTracker
from dyadikos.core.puzzles import Puzzle, puzzle_count_for_sides, puzzles_for_sides
from dyadikos.core.shapes import ShapeLevel


@dataclass
class ShapeState:
    """UI state for a shape tier: unlock status and how many puzzles are done."""

    shape: ShapeLevel
    unlocked: bool
    completed: int
    total: int
    is_current: bool = False

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.completed >= self.total


@dataclass
class PuzzleState:
    """UI state for a single puzzle card."""

    puzzle: Puzzle
    unlocked: bool
    completed: bool
    is_current: bool = False


def build_shape_states(tracker: ProgressTracker) -> List[ShapeState]:
    """Compute state for every shape and mark the first unfinished open one."""
    states = [
        ShapeState(
            shape=shape,
            unlocked=tracker.is_shape_unlocked(shape.sides),
            completed=tracker.completed_count(shape.sides),
            total=puzzle_count_for_sides(shape.sides),
        )
        for shape in tracker.shapes
    ]
    for st in states:
        if st.unlocked and not st.is_complete:
            st.is_current = True
            break
    return states


def build_puzzle_states(tracker: ProgressTracker, sides: int) -> List[PuzzleState]:
    current = tracker.current_puzzle(sides)
    return [
        PuzzleState(
            puzzle=puzzle,
            unlocked=tracker.is_puzzle_unlocked(sides, puzzle.puzzle_number),
            completed=tracker.is_puzzle_complete(puzzle.id),
            is_current=puzzle.puzzle_number == current,
        )
        for puzzle in puzzles_for_sides(sides)
    ]
