from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml

SHAPES_FILE = Path(__file__).resolve().parent.parent / "data" / "shapes.yaml"


@dataclass(frozen=True)
class ShapeLevel:
    sides: int
    name: str


class ShapeRepository:
    """Ordered shape tiers loaded from ``data/shapes.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or SHAPES_FILE
        self._shapes = self._load_shapes()

    def all(self) -> List[ShapeLevel]:
        return list(self._shapes.values())

    def get(self, sides: int) -> Optional[ShapeLevel]:
        return self._shapes.get(sides)

    def index_of(self, sides: int) -> int:
        """Position of the shape in unlock order, or -1 if unknown."""
        for idx, candidate in enumerate(self._shapes):
            if candidate == sides:
                return idx
        return -1

    def name_for(self, sides: int) -> str:
        shape = self._shapes.get(sides)
        return shape.name if shape is not None else f"{sides}-gon"

    def _load_shapes(self) -> Dict[int, ShapeLevel]:
        if not self._path.exists():
            raise FileNotFoundError(f"Shapes file not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{self._path.name}: expected YAML with a 'shapes' list")
        entries = raw.get("shapes")
        if not isinstance(entries, list) or not entries:
            raise ValueError(f"{self._path.name}: 'shapes' must be a non-empty list")

        shapes: Dict[int, ShapeLevel] = {}
        previous = 0
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValueError(f"{self._path.name}: each shape needs 'sides' and 'name'")
            sides = entry.get("sides")
            name = entry.get("name")
            if not isinstance(sides, int) or isinstance(sides, bool) or sides < 3:
                raise ValueError(f"{self._path.name}: invalid 'sides' {sides!r}")
            if sides <= previous:
                raise ValueError(f"{self._path.name}: shapes must be strictly ascending ({sides} after {previous})")
            if not name or not isinstance(name, str):
                raise ValueError(f"{self._path.name}: missing or invalid 'name' for {sides} sides")
            shapes[sides] = ShapeLevel(sides=sides, name=name.strip())
            previous = sides
        return shapes


@lru_cache(maxsize=1)
def default_repository() -> ShapeRepository:
    return ShapeRepository()


def default_shapes() -> List[ShapeLevel]:
    """The packaged shape tiers, loaded once per process."""
    return default_repository().all()
