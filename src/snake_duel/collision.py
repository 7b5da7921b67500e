"""Per-tick collision resolution between snakes, walls, and food."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from snake_duel.config import GameConfig, TieBreakPolicy
from snake_duel.geometry import distance

if TYPE_CHECKING:
    from snake_duel.food import Food
    from snake_duel.snake import Snake

logger = logging.getLogger(__name__)

# Segments nearest the head that never count for self-collision; the neck
# of a turning snake always lies within one radius of its head.
NECK_SEGMENTS = 4


class LossCause(enum.Enum):
    """Why a snake lost."""

    WALL = "wall"
    SELF = "self"
    OPPONENT = "opponent"


@dataclass(frozen=True)
class CollisionOutcome:
    """The terminating event of a match.

    ``winner`` and ``loser`` are ``None`` for a draw; ``losses`` always lists
    every snake reported as lost, with its cause.
    """

    winner: Snake | None
    loser: Snake | None
    losses: tuple[tuple[Snake, LossCause], ...]

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def losers(self) -> tuple[Snake, ...]:
        return tuple(snake for snake, _ in self.losses)


@dataclass
class TickReport:
    """Everything the collision engine observed on one tick."""

    outcome: CollisionOutcome | None = None
    eaten: list[Snake] = field(default_factory=list)


class CollisionEngine:
    """Stateless collision checks, evaluated in a fixed precedence order.

    For each snake: walls first, then its own body, then the opponent's body.
    Food is checked afterwards, and only on ticks that ended nobody's match.
    """

    def __init__(self, config: GameConfig) -> None:
        self.config = config

    def hits_wall(self, snake: Snake) -> bool:
        cfg = self.config
        x, y = snake.head
        t = cfg.wall_thickness
        return x < t or x > cfg.width - t or y < t or y > cfg.height - t

    def hits_self(self, snake: Snake) -> bool:
        head = snake.head
        body = snake.body
        return any(
            distance(head, body[i]) < snake.radius
            for i in range(NECK_SEGMENTS, len(body))
        )

    def hits_opponent(self, snake: Snake, opponent: Snake) -> bool:
        head = snake.head
        return any(distance(head, seg) < snake.radius for seg in opponent.body)

    def loss_cause(self, snake: Snake, opponent: Snake) -> LossCause | None:
        """Return why *snake* lost this tick, or ``None`` if it survives."""
        if self.hits_wall(snake):
            return LossCause.WALL
        if self.hits_self(snake):
            return LossCause.SELF
        if self.hits_opponent(snake, opponent):
            return LossCause.OPPONENT
        return None

    def check_losses(self, player1: Snake, player2: Snake) -> CollisionOutcome | None:
        """Apply the loss checks to both snakes and the tie-break policy."""
        cause1 = self.loss_cause(player1, player2)

        if self.config.tie_break is TieBreakPolicy.FIRST_CHECKED:
            if cause1 is not None:
                return CollisionOutcome(player2, player1, ((player1, cause1),))
            cause2 = self.loss_cause(player2, player1)
            if cause2 is not None:
                return CollisionOutcome(player1, player2, ((player2, cause2),))
            return None

        cause2 = self.loss_cause(player2, player1)
        if cause1 is not None and cause2 is not None:
            return CollisionOutcome(
                None, None, ((player1, cause1), (player2, cause2)),
            )
        if cause1 is not None:
            return CollisionOutcome(player2, player1, ((player1, cause1),))
        if cause2 is not None:
            return CollisionOutcome(player1, player2, ((player2, cause2),))
        return None

    def touches_food(self, snake: Snake, food: Food) -> bool:
        return distance(snake.head, food.position) < snake.radius + food.radius

    def resolve(self, player1: Snake, player2: Snake, food: Food) -> TickReport:
        """Run every check for one tick, growing snakes that ate."""
        report = TickReport(outcome=self.check_losses(player1, player2))
        if report.outcome is not None:
            return report

        for snake in (player1, player2):
            if self.touches_food(snake, food):
                snake.grow()
                food.respawn()
                report.eaten.append(snake)
                logger.debug("%s ate food, score %d.", snake.name, snake.score)
        return report
