"""Puzzle catalog: one puzzle per non-zero value representable by a shape."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from dyadikos.core.binary import binary_string
from dyadikos.core.shapes import ShapeLevel, default_shapes

_PUZZLE_ID_RE = re.compile(r"^(\d+)-(\d{3,})$")


@dataclass(frozen=True)
class Puzzle:
    id: str
    sides: int
    puzzle_number: int
    goal_number: int
    description: str


def puzzle_id(sides: int, puzzle_number: int) -> str:
    return f"{sides}-{puzzle_number:03d}"


def binary_slot_count(sides: int) -> int:
    return sides // 2


def puzzle_count_for_sides(sides: int) -> int:
    bits = binary_slot_count(sides)
    if bits <= 0:
        return 0
    return (1 << bits) - 1


@lru_cache(maxsize=None)
def puzzles_for_sides(sides: int) -> Tuple[Puzzle, ...]:
    """All puzzles for a polygon size, goals ``1..2**B - 1`` in order."""
    width = binary_slot_count(sides)
    return tuple(
        Puzzle(
            id=puzzle_id(sides, number),
            sides=sides,
            puzzle_number=number,
            goal_number=number,
            description=f"Binary: {binary_string(number, width)}",
        )
        for number in range(1, puzzle_count_for_sides(sides) + 1)
    )


def puzzle_by_sides_and_number(sides: int, puzzle_number: int) -> Optional[Puzzle]:
    for puzzle in puzzles_for_sides(sides):
        if puzzle.puzzle_number == puzzle_number:
            return puzzle
    return None


def puzzle_by_id(id_: str) -> Optional[Puzzle]:
    m = _PUZZLE_ID_RE.match(id_)
    if not m:
        return None
    puzzle = puzzle_by_sides_and_number(int(m.group(1)), int(m.group(2)))
    if puzzle is None or puzzle.id != id_:
        return None
    return puzzle


def all_puzzles(shapes: Optional[Sequence[ShapeLevel]] = None) -> List[Puzzle]:
    """Global catalog order: shapes in unlock order, puzzles ascending."""
    shapes = default_shapes() if shapes is None else shapes
    catalog: List[Puzzle] = []
    for shape in shapes:
        catalog.extend(puzzles_for_sides(shape.sides))
    return catalog


def total_puzzles(shapes: Optional[Sequence[ShapeLevel]] = None) -> int:
    shapes = default_shapes() if shapes is None else shapes
    return sum(puzzle_count_for_sides(shape.sides) for shape in shapes)


def puzzle_by_index(index: int, shapes: Optional[Sequence[ShapeLevel]] = None) -> Optional[Puzzle]:
    if index < 0:
        return None
    catalog = all_puzzles(shapes)
    if index >= len(catalog):
        return None
    return catalog[index]


def next_puzzle(puzzle: Puzzle) -> Optional[Puzzle]:
    """The following puzzle of the same shape, or None after the last one."""
    return puzzle_by_sides_and_number(puzzle.sides, puzzle.puzzle_number + 1)
