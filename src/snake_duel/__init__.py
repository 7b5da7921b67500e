"""Snake Duel: two-player continuous snake game engine."""

from snake_duel.collision import CollisionEngine, CollisionOutcome, LossCause
from snake_duel.config import GameConfig, KeyBindings, TieBreakPolicy
from snake_duel.driver import ControlState, FixedTimestep, FrameDriver, KeyboardState
from snake_duel.errors import (
    ConfigError,
    InvalidTransitionError,
    MissingCollaboratorError,
    SnakeDuelError,
)
from snake_duel.food import Food
from snake_duel.geometry import Point, distance
from snake_duel.match import Match, MatchResult, MatchState, MatchStateMachine
from snake_duel.snake import Snake

__all__ = [
    "CollisionEngine",
    "CollisionOutcome",
    "ConfigError",
    "ControlState",
    "FixedTimestep",
    "Food",
    "FrameDriver",
    "GameConfig",
    "InvalidTransitionError",
    "KeyBindings",
    "KeyboardState",
    "LossCause",
    "Match",
    "MatchResult",
    "MatchState",
    "MatchStateMachine",
    "MissingCollaboratorError",
    "Point",
    "Snake",
    "SnakeDuelError",
    "TieBreakPolicy",
    "distance",
]
