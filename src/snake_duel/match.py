"""Match aggregate and the deadline-driven match state machine."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from snake_duel.config import GameConfig
from snake_duel.errors import InvalidTransitionError
from snake_duel.food import Food
from snake_duel.geometry import Point
from snake_duel.particles import ParticleSystem
from snake_duel.snake import Snake

if TYPE_CHECKING:
    from snake_duel.collision import CollisionOutcome
    from snake_duel.driver import ScoreSink

logger = logging.getLogger(__name__)

PLAYER_IDS = (1, 2)
DRAW_NAME = "DRAW"


class MatchState(enum.Enum):
    """Lifecycle states of a match."""

    IDLE = "idle"
    RUNNING = "running"
    ENDING = "ending"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class MatchResult:
    """Final result of a finished match."""

    winner: Snake | None
    loser: Snake | None
    losers: tuple[Snake, ...]
    tick: int
    scores: tuple[int, int]

    @property
    def winner_name(self) -> str:
        return self.winner.name if self.winner is not None else DRAW_NAME

    def to_dict(self) -> dict:
        return {
            "winner": self.winner_name,
            "losers": [s.name for s in self.losers],
            "tick": self.tick,
            "scores": list(self.scores),
        }


class Match:
    """All mutable game objects of one session.

    Snakes, food, and particles are replaced wholesale when a new match
    begins; the aggregate itself lives for the whole session.
    """

    def __init__(self, config: GameConfig | None = None) -> None:
        self.config = config or GameConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.state = MatchState.IDLE
        self.ready: dict[int, bool] = {pid: False for pid in PLAYER_IDS}
        self.generation = 0
        self.tick = 0
        self.result: MatchResult | None = None
        self.particles = ParticleSystem(
            count=self.config.particle_count,
            speed=self.config.particle_speed,
            lifespan=self.config.particle_lifespan,
            rng=self.rng,
        )
        self.reset_entities()

    def reset_entities(self) -> None:
        """Place fresh snakes at their spawn points and fresh food."""
        cfg = self.config
        mid_y = cfg.height / 2
        self.player1 = Snake.from_config(cfg, Point(cfg.spawn_inset, mid_y), 0.0, 0)
        self.player2 = Snake.from_config(
            cfg, Point(cfg.width - cfg.spawn_inset, mid_y), math.pi, 1,
        )
        self.food = Food(
            cfg.width, cfg.height, cfg.wall_thickness,
            radius=cfg.food_radius, rng=self.rng,
        )
        self.particles.clear()

    @property
    def snakes(self) -> tuple[Snake, Snake]:
        return self.player1, self.player2

    def player_id(self, snake: Snake) -> int:
        return 1 if snake is self.player1 else 2

    def to_dict(self) -> dict:
        """Return the full, serializable match state."""
        return {
            "state": self.state.value,
            "generation": self.generation,
            "tick": self.tick,
            "ready": {str(pid): flag for pid, flag in self.ready.items()},
            "snakes": [s.to_dict() for s in self.snakes],
            "food": self.food.to_dict(),
            "particles": self.particles.to_list(),
            "result": self.result.to_dict() if self.result else None,
        }


class MatchStateMachine:
    """Drives a :class:`Match` through IDLE, RUNNING, ENDING and COOLDOWN.

    Delayed transitions are absolute deadlines on a monotonic clock, checked
    by :meth:`update`. Every public method takes the current time so the
    machine can be driven without real waiting.
    """

    def __init__(self, match: Match, score_sink: ScoreSink | None = None) -> None:
        self.match = match
        self.config = match.config
        self.score_sink = score_sink
        self.start_at: float | None = None
        self.cooldown_at: float | None = None
        self.unlock_at: float | None = None

    @property
    def state(self) -> MatchState:
        return self.match.state

    @property
    def is_counting_down(self) -> bool:
        return self.match.state is MatchState.IDLE and self.start_at is not None

    def actions_enabled(self, now: float) -> bool:
        """Whether rematch / return-to-menu are currently accepted."""
        return (
            self.match.state is MatchState.COOLDOWN
            and self.unlock_at is not None
            and now >= self.unlock_at
        )

    # --- readiness ------------------------------------------------------

    def set_ready(self, player_id: int, value: bool, now: float) -> bool:
        """Set a player's readiness, arming or disarming the start deadline."""
        if player_id not in PLAYER_IDS:
            raise InvalidTransitionError(f"Unknown player {player_id}.")
        if self.match.state is not MatchState.IDLE:
            raise InvalidTransitionError(
                f"Readiness can only change while idle, not {self.match.state.value}."
            )
        self.match.ready[player_id] = value
        self._sync_start_deadline(now)
        return value

    def toggle_ready(self, player_id: int, now: float) -> bool:
        """Flip a player's readiness and return the new value."""
        if player_id not in PLAYER_IDS:
            raise InvalidTransitionError(f"Unknown player {player_id}.")
        return self.set_ready(player_id, not self.match.ready[player_id], now)

    def _sync_start_deadline(self, now: float) -> None:
        both_ready = all(self.match.ready.values())
        if both_ready and self.start_at is None:
            self.start_at = now + self.config.start_delay
            logger.info("Both players ready; match starts in %.1fs.", self.config.start_delay)
        elif not both_ready and self.start_at is not None:
            self.start_at = None
            logger.info("Start cancelled; a player is no longer ready.")

    # --- deadlines ------------------------------------------------------

    def update(self, now: float) -> MatchState | None:
        """Fire any due deadline. Returns the new state if one was entered."""
        state = self.match.state
        if state is MatchState.IDLE and self.start_at is not None and now >= self.start_at:
            self._begin_match()
            return MatchState.RUNNING
        if (
            state is MatchState.ENDING
            and self.cooldown_at is not None
            and now >= self.cooldown_at
        ):
            self._enter_cooldown(now)
            return MatchState.COOLDOWN
        return None

    def _begin_match(self) -> None:
        match = self.match
        self.start_at = None
        match.reset_entities()
        match.generation += 1
        match.tick = 0
        match.result = None
        match.state = MatchState.RUNNING
        logger.info("Match %d started.", match.generation)

    def _enter_cooldown(self, now: float) -> None:
        match = self.match
        self.cooldown_at = None
        self.unlock_at = now + self.config.lockout
        match.state = MatchState.COOLDOWN
        assert match.result is not None  # noqa: S101
        logger.info(
            "Match %d over: %s. Actions unlock in %.0fs.",
            match.generation, match.result.winner_name, self.config.lockout,
        )
        if self.score_sink is not None:
            self.score_sink.match_finished(match.result.winner_name)

    # --- events ---------------------------------------------------------

    def report(self, outcome: CollisionOutcome, now: float) -> None:
        """Record the terminating collision and freeze the simulation."""
        match = self.match
        if match.state is not MatchState.RUNNING:
            raise InvalidTransitionError(
                f"Cannot end a match that is {match.state.value}."
            )
        match.result = MatchResult(
            winner=outcome.winner,
            loser=outcome.loser,
            losers=outcome.losers,
            tick=match.tick,
            scores=(match.player1.score, match.player2.score),
        )
        for snake, cause in outcome.losses:
            match.particles.explode(snake.head, snake.color)
            logger.info(
                "%s lost at tick %d (%s).", snake.name, match.tick, cause.value,
            )
        match.state = MatchState.ENDING
        self.cooldown_at = now + self.config.ending_delay

    # --- cooldown actions -----------------------------------------------

    def _require_unlocked(self, action: str, now: float) -> None:
        if self.match.state is not MatchState.COOLDOWN:
            raise InvalidTransitionError(
                f"Cannot {action} while {self.match.state.value}."
            )
        if not self.actions_enabled(now):
            raise InvalidTransitionError(
                f"Cannot {action} yet; locked for another "
                f"{self.unlock_at - now:.1f}s."
            )

    def return_to_menu(self, now: float) -> None:
        """Go back to IDLE with both players not ready."""
        self._require_unlocked("return to menu", now)
        self.unlock_at = None
        self.start_at = None
        self.match.state = MatchState.IDLE
        for pid in PLAYER_IDS:
            self.match.ready[pid] = False
        logger.info("Returned to menu.")

    def rematch(self, now: float) -> None:
        """Go back to IDLE with both players ready, arming the start deadline."""
        self._require_unlocked("rematch", now)
        self.unlock_at = None
        self.start_at = None
        self.match.state = MatchState.IDLE
        for pid in PLAYER_IDS:
            self.match.ready[pid] = True
        self._sync_start_deadline(now)

    def snapshot(self, now: float) -> dict:
        """Match state plus timing information for presentation."""
        data = self.match.to_dict()
        data["countdown"] = (
            max(0.0, self.start_at - now) if self.is_counting_down else None
        )
        data["actions_enabled"] = self.actions_enabled(now)
        data["lockout_remaining"] = (
            max(0.0, self.unlock_at - now)
            if self.match.state is MatchState.COOLDOWN and self.unlock_at is not None
            else None
        )
        return data
