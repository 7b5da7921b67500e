"""Food placement logic."""

from __future__ import annotations

import logging

import numpy as np

from snake_duel.geometry import Point

logger = logging.getLogger(__name__)


class Food:
    """The single food item in the arena.

    Uses a seeded NumPy RNG for deterministic, reproducible placement.
    Positions are drawn uniformly from the arena interior, keeping a margin
    of two wall thicknesses from every edge.
    """

    def __init__(
        self,
        width: float,
        height: float,
        wall_thickness: float,
        radius: float = 5.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        margin = 2 * wall_thickness
        if width <= 2 * margin or height <= 2 * margin:
            raise ValueError("Arena is too small to place food.")
        self.radius = radius
        self.rng = rng if rng is not None else np.random.default_rng()
        self._low = (margin, margin)
        self._high = (width - margin, height - margin)
        self.position = Point(0.0, 0.0)
        self.respawn()

    def respawn(self) -> Point:
        """Move the food to a new random position and return it.

        The previous position is not excluded.
        """
        x, y = self.rng.uniform(self._low, self._high)
        self.position = Point(float(x), float(y))
        logger.debug("Food spawned at (%.1f, %.1f).", x, y)
        return self.position

    def to_dict(self) -> dict:
        """Serialize food state to a dictionary."""
        return {"position": self.position.to_list(), "radius": self.radius}
