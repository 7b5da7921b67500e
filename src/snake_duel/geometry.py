"""Continuous 2D geometry helpers."""

from __future__ import annotations

import math
from typing import NamedTuple


class Point(NamedTuple):
    """An immutable position in arena pixel coordinates."""

    x: float
    y: float

    def moved(self, heading: float, distance: float) -> Point:
        """Return the point *distance* away along *heading* (radians)."""
        return Point(
            self.x + math.cos(heading) * distance,
            self.y + math.sin(heading) * distance,
        )

    def to_list(self) -> list[float]:
        return [self.x, self.y]


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)
