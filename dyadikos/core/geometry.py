"""Polygon geometry: vertex placement, chords and cyclic distance."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

POINT_HIT_TOLERANCE = 60.0
CANVAS_RADIUS_SCALE = 0.3


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    index: int


@dataclass(frozen=True, eq=False)
class Chord:
    """Undirected line between two distinct polygon vertices.

    ``Chord(1, 4)`` and ``Chord(4, 1)`` compare and hash equal.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise ValueError(f"Chord indices must be non-negative: ({self.start}, {self.end})")
        if self.start == self.end:
            raise ValueError(f"Chord endpoints must differ: ({self.start}, {self.end})")

    def normalized(self) -> Tuple[int, int]:
        """Return the endpoints as ``(low, high)``."""
        return (min(self.start, self.end), max(self.start, self.end))

    def fits(self, sides: int) -> bool:
        return self.start < sides and self.end < sides

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chord):
            return NotImplemented
        return self.normalized() == other.normalized()

    def __hash__(self) -> int:
        return hash(self.normalized())


def points_on_circle(sides: int, radius: float, center_x: float, center_y: float) -> List[Point]:
    """Place ``sides`` points on a circle, index 0 at the top, going clockwise."""
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}")
    angle_slice = (2 * math.pi) / sides
    points: List[Point] = []
    for i in range(sides):
        angle = math.pi / 2 - i * angle_slice
        points.append(
            Point(
                x=center_x + radius * math.cos(angle),
                y=center_y + radius * math.sin(angle),
                index=i,
            )
        )
    return points


def layout_points(sides: int, width: float, height: float, scale: float = CANVAS_RADIUS_SCALE) -> List[Point]:
    """Points for a canvas of the given size: centered, radius ``min(w, h) * scale``."""
    radius = min(width, height) * scale
    return points_on_circle(sides, radius, width / 2.0, height / 2.0)


def cyclic_distance(a: int, b: int, sides: int) -> int:
    """Minimum number of polygon edges between vertices ``a`` and ``b``."""
    if a == b:
        raise ValueError(f"Distance is undefined for a single vertex ({a})")
    direct = abs(a - b)
    return min(direct, sides - direct)


def chord_distance(chord: Chord, sides: int) -> int:
    return cyclic_distance(chord.start, chord.end, sides)


def all_chords_at_distance(sides: int, distance: int) -> List[Chord]:
    """Every chord of the given length, each undirected chord exactly once.

    Chords are returned as ``(low, high)`` pairs. Out-of-range distances
    yield no chords.
    """
    if distance < 1 or distance > sides // 2:
        return []
    chords: List[Chord] = []
    seen = set()
    for i in range(sides):
        low, high = sorted((i, (i + distance) % sides))
        # antipodal pairs come up twice on even polygons
        if (low, high) in seen:
            continue
        seen.add((low, high))
        chords.append(Chord(low, high))
    return chords


def point_at(
    points: Iterable[Point],
    x: float,
    y: float,
    tolerance: float = POINT_HIT_TOLERANCE,
    exclude: Optional[int] = None,
) -> Optional[Point]:
    """Return the vertex nearest to ``(x, y)`` within ``tolerance``, if any."""
    best: Optional[Point] = None
    best_distance = tolerance
    for point in points:
        if exclude is not None and point.index == exclude:
            continue
        d = math.hypot(point.x - x, point.y - y)
        if d < best_distance:
            best = point
            best_distance = d
    return best
