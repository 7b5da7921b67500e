"""Snake representation and continuous movement logic."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from snake_duel.geometry import Point

if TYPE_CHECKING:
    from snake_duel.config import GameConfig


class Snake:
    """A snake represented as an ordered deque of body segment points.

    The head is ``body[0]``; the tail is ``body[-1]``. Each tick the snake
    turns by ``turn_direction * turn_rate`` radians and moves ``speed``
    pixels along its heading.
    """

    def __init__(
        self,
        start: Point,
        heading: float = 0.0,
        *,
        name: str = "PLAYER",
        color: str = "#fff",
        length: int = 15,
        speed: float = 2.0,
        turn_rate: float = 0.06,
        radius: float = 7.0,
        growth_factor: int = 5,
    ) -> None:
        if length < 1:
            raise ValueError("Snake length must be at least 1.")
        self.name = name
        self.color = color
        self.heading = heading
        self.speed = speed
        self.turn_rate = turn_rate
        self.radius = radius
        self.growth_factor = growth_factor
        self.turn_direction = 0
        self.growth_pending = 0
        self.score = 0

        # Straight tail trailing behind the head, one step apart.
        self.body: deque[Point] = deque(
            start.moved(heading, -speed * i) for i in range(length)
        )

    @classmethod
    def from_config(
        cls, config: GameConfig, start: Point, heading: float, player_index: int,
    ) -> Snake:
        """Build a snake using the physics constants from *config*."""
        return cls(
            start,
            heading,
            name=config.player_names[player_index],
            color=config.player_colors[player_index],
            length=config.initial_length,
            speed=config.speed,
            turn_rate=config.turn_rate,
            radius=config.snake_radius,
            growth_factor=config.growth_factor,
        )

    @property
    def head(self) -> Point:
        """Return the head position."""
        return self.body[0]

    def set_turn(self, left: bool, right: bool) -> None:
        """Set the turn direction from latched keys; left wins when both are held."""
        if left:
            self.turn_direction = -1
        elif right:
            self.turn_direction = 1
        else:
            self.turn_direction = 0

    def advance(self) -> Point | None:
        """Move the snake one tick forward.

        Returns the dropped tail point, or ``None`` if the snake grew.
        """
        self.heading += self.turn_direction * self.turn_rate
        self.body.appendleft(self.head.moved(self.heading, self.speed))
        if self.growth_pending > 0:
            self.growth_pending -= 1
            return None
        return self.body.pop()

    def grow(self) -> None:
        """Award one point and owe ``growth_factor`` more segments."""
        self.growth_pending += self.growth_factor
        self.score += 1

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "name": self.name,
            "color": self.color,
            "heading": self.heading,
            "score": self.score,
            "growth_pending": self.growth_pending,
            "body": [seg.to_list() for seg in self.body],
        }
