"""Game configuration: arena, snake physics, timing, and key bindings."""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from snake_duel.errors import ConfigError

logger = logging.getLogger(__name__)

_INT_FIELDS = (
    "initial_length", "growth_factor", "particle_count", "particle_lifespan",
    "tick_rate", "max_steps_per_frame", "frame_rate",
)
_NUMBER_FIELDS = (
    "width", "height", "wall_thickness", "speed", "turn_rate", "snake_radius",
    "spawn_inset", "food_radius", "particle_speed", "start_delay",
    "ending_delay", "lockout",
)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TieBreakPolicy(enum.Enum):
    """How a tick in which both snakes lose is resolved."""

    DRAW = "draw"
    # Player 1 is checked first; player 2 wins whenever player 1 lost, even
    # if player 2 lost on the same tick.
    FIRST_CHECKED = "first_checked"


@dataclass(frozen=True)
class KeyBindings:
    """Lower-cased key names mapped to the four logical controls."""

    p1_left: str = "arrowleft"
    p1_right: str = "arrowright"
    p2_left: str = "a"
    p2_right: str = "d"

    def __post_init__(self) -> None:
        for name, key in asdict(self).items():
            if not isinstance(key, str):
                raise ConfigError(
                    f"key binding {name} must be a string, got {type(key).__name__}."
                )
        keys = [k.lower() for k in asdict(self).values()]
        if any(not k for k in keys):
            raise ConfigError("key bindings must not be empty.")
        if len(set(keys)) != len(keys):
            raise ConfigError("key bindings must be distinct.")


@dataclass(frozen=True)
class GameConfig:
    """Every tunable constant of a match.

    Validation runs at construction so that a bad configuration is rejected
    before any match starts.
    """

    # Arena
    width: float = 800.0
    height: float = 600.0
    wall_thickness: float = 10.0

    # Snakes
    speed: float = 2.0
    turn_rate: float = 0.06
    initial_length: int = 15
    snake_radius: float = 7.0
    growth_factor: int = 5
    spawn_inset: float = 150.0
    player_names: tuple[str, str] = ("PLAYER 1", "PLAYER 2")
    player_colors: tuple[str, str] = ("#0f0", "#f0f")

    # Food
    food_radius: float = 5.0

    # Loss explosion
    particle_count: int = 40
    particle_speed: float = 3.0
    particle_lifespan: int = 60

    # Timing (seconds unless noted)
    tick_rate: int = 60
    max_steps_per_frame: int = 5
    frame_rate: int = 60
    start_delay: float = 1.0
    ending_delay: float = 2.0
    lockout: float = 30.0

    tie_break: TieBreakPolicy = TieBreakPolicy.DRAW
    key_bindings: KeyBindings = field(default_factory=KeyBindings)
    seed: int | None = None

    def __post_init__(self) -> None:
        self._check_types()
        if self.width <= 0 or self.height <= 0:
            raise ConfigError("arena width and height must be positive.")
        if self.wall_thickness < 0:
            raise ConfigError("wall_thickness must not be negative.")
        # Food spawns at least two wall thicknesses away from every edge.
        if self.width <= 4 * self.wall_thickness or self.height <= 4 * self.wall_thickness:
            raise ConfigError(
                "arena is too small for its wall_thickness; the food area "
                "would be empty."
            )
        if self.speed <= 0:
            raise ConfigError("speed must be positive.")
        if self.turn_rate < 0:
            raise ConfigError("turn_rate must not be negative.")
        if self.initial_length < 1:
            raise ConfigError("initial_length must be at least 1.")
        if self.snake_radius <= 0:
            raise ConfigError("snake_radius must be positive.")
        if self.growth_factor < 0:
            raise ConfigError("growth_factor must not be negative.")
        if self.food_radius <= 0:
            raise ConfigError("food_radius must be positive.")
        if len(self.player_names) != 2 or len(self.player_colors) != 2:
            raise ConfigError("exactly two player names and colors are required.")

        if not self.wall_thickness < self.spawn_inset < self.width / 2:
            raise ConfigError(
                "spawn_inset must lie between the wall and the arena centre."
            )
        tail_x = self.spawn_inset - (self.initial_length - 1) * self.speed
        if tail_x < self.wall_thickness:
            raise ConfigError(
                "initial_length does not fit behind the spawn point; reduce "
                "initial_length or speed, or increase spawn_inset."
            )
        mid_y = self.height / 2
        if not self.wall_thickness <= mid_y <= self.height - self.wall_thickness:
            raise ConfigError("spawn row lies inside the wall band.")

        if self.particle_count < 0:
            raise ConfigError("particle_count must not be negative.")
        if self.particle_speed < 0:
            raise ConfigError("particle_speed must not be negative.")
        if self.particle_lifespan < 1:
            raise ConfigError("particle_lifespan must be at least 1.")

        if self.tick_rate < 1:
            raise ConfigError("tick_rate must be at least 1.")
        if self.frame_rate < 1:
            raise ConfigError("frame_rate must be at least 1.")
        if self.max_steps_per_frame < 1:
            raise ConfigError("max_steps_per_frame must be at least 1.")
        for name in ("start_delay", "ending_delay", "lockout"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative.")

        if not isinstance(self.tie_break, TieBreakPolicy):
            raise ConfigError(f"unknown tie_break policy: {self.tie_break!r}.")

    def _check_types(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if not _is_int(value):
                raise ConfigError(
                    f"{name} must be an integer, got {type(value).__name__}."
                )
        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                raise ConfigError(
                    f"{name} must be a number, got {type(value).__name__}."
                )
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError(
                f"seed must be an integer or null, got {type(self.seed).__name__}."
            )
        for name in ("player_names", "player_colors"):
            value = getattr(self, name)
            if not isinstance(value, tuple) or not all(
                isinstance(item, str) for item in value
            ):
                raise ConfigError(f"{name} must be a pair of strings.")
        if not isinstance(self.key_bindings, KeyBindings):
            raise ConfigError("key_bindings must be a KeyBindings instance.")

    @property
    def tick_interval(self) -> float:
        """Seconds of simulated time per tick."""
        return 1.0 / self.tick_rate

    def to_dict(self) -> dict:
        """Serialize to a plain, JSON-compatible dict."""
        d = asdict(self)
        d["tie_break"] = self.tie_break.value
        d["player_names"] = list(self.player_names)
        d["player_colors"] = list(self.player_colors)
        return d

    def with_overrides(self, **overrides) -> GameConfig:
        """Return a validated copy with the given fields replaced."""
        return dataclasses.replace(self, **overrides)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        """Build a config from a dict produced by :meth:`to_dict`."""
        data = dict(raw)
        unknown = set(data) - {f.name for f in dataclasses.fields(cls)}
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}.")
        if "tie_break" in data:
            try:
                data["tie_break"] = TieBreakPolicy(data["tie_break"])
            except ValueError as exc:
                raise ConfigError(
                    f"unknown tie_break policy: {data['tie_break']!r}."
                ) from exc
        if "key_bindings" in data:
            bindings = data["key_bindings"]
            if not isinstance(bindings, dict):
                raise ConfigError("key_bindings must be an object.")
            unknown = set(bindings) - {f.name for f in dataclasses.fields(KeyBindings)}
            if unknown:
                raise ConfigError(f"unknown key binding names: {sorted(unknown)}.")
            data["key_bindings"] = KeyBindings(**bindings)
        for name in ("player_names", "player_colors"):
            if name in data:
                if not isinstance(data[name], list):
                    raise ConfigError(f"{name} must be a list of two strings.")
                data[name] = tuple(data[name])
        return cls(**data)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))
