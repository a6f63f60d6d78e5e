"""Distance-to-bit encoding and goal evaluation.

Each distance class ``d`` in ``1..floor(sides / 2)`` owns bit ``d - 1``. A bit
is set only once every chord of that distance has been drawn.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Set

from dyadikos.core.geometry import Chord, all_chords_at_distance, chord_distance


class BinaryValue(NamedTuple):
    binary: str
    decimal: int


def distance_to_bit(distance: int) -> int:
    return distance - 1


def bit_to_distance(bit: int) -> int:
    return bit + 1


def binary_string(number: int, width: int) -> str:
    """Zero-padded base-2 rendering of ``number``."""
    return format(number, "b").zfill(width)


def _chord_set(drawn: Iterable[Chord]) -> Set[Chord]:
    return drawn if isinstance(drawn, (set, frozenset)) else set(drawn)


def is_distance_complete(drawn: Iterable[Chord], distance: int, sides: int) -> bool:
    """Return True if every chord of ``distance`` is in ``drawn``."""
    if distance < 1 or distance > sides // 2:
        return False
    drawn_set = _chord_set(drawn)
    return all(chord in drawn_set for chord in all_chords_at_distance(sides, distance))


def complete_bit_positions(drawn: Iterable[Chord], sides: int) -> List[int]:
    drawn_set = _chord_set(drawn)
    return [
        distance_to_bit(distance)
        for distance in range(1, sides // 2 + 1)
        if is_distance_complete(drawn_set, distance, sides)
    ]


def current_value(drawn: Iterable[Chord], sides: int) -> BinaryValue:
    """Binary string (most significant bit first) and decimal value of ``drawn``."""
    bit_count = sides // 2
    complete = set(complete_bit_positions(drawn, sides))
    digits = []
    decimal = 0
    for bit in range(bit_count - 1, -1, -1):
        if bit in complete:
            digits.append("1")
            decimal += 1 << bit
        else:
            digits.append("0")
    return BinaryValue(binary="".join(digits) or "0", decimal=decimal)


def is_chord_complete(chord: Chord, drawn: Iterable[Chord], sides: int) -> bool:
    """Return True if the distance class of ``chord`` is fully drawn."""
    return is_distance_complete(drawn, chord_distance(chord, sides), sides)


def has_reached_goal(drawn: Iterable[Chord], goal: int, sides: int) -> bool:
    """Exact match: extra completed distances move the value past the goal."""
    return current_value(drawn, sides).decimal == goal


def required_distances(goal: int, sides: int) -> List[int]:
    """Distances whose bit is set in ``goal``, ascending."""
    return [bit_to_distance(bit) for bit in range(sides // 2) if goal & (1 << bit)]
