"""Short-lived explosion particles shown when a snake loses."""

from __future__ import annotations

import math

import numpy as np

from snake_duel.geometry import Point


class Particle:
    """A single particle moving in a straight line until its life runs out."""

    __slots__ = ("position", "velocity", "remaining_life", "lifespan", "color")

    def __init__(
        self, position: Point, velocity: Point, lifespan: int, color: str,
    ) -> None:
        self.position = position
        self.velocity = velocity
        self.remaining_life = lifespan
        self.lifespan = lifespan
        self.color = color

    @property
    def alive(self) -> bool:
        return self.remaining_life > 0

    def update(self) -> None:
        self.position = Point(
            self.position.x + self.velocity.x,
            self.position.y + self.velocity.y,
        )
        self.remaining_life -= 1

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_list(),
            "color": self.color,
            # Renderers fade particles out with this.
            "alpha": self.remaining_life / self.lifespan,
        }


class ParticleSystem:
    """Owns the live particles of a match."""

    def __init__(
        self,
        count: int = 40,
        speed: float = 3.0,
        lifespan: int = 60,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.count = count
        self.speed = speed
        self.lifespan = lifespan
        self.rng = rng if rng is not None else np.random.default_rng()
        self.particles: list[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def explode(self, origin: Point, color: str) -> None:
        """Spawn a burst of particles at *origin* flying in random directions."""
        angles = self.rng.uniform(0.0, 2 * math.pi, size=self.count)
        speeds = self.rng.uniform(0.0, self.speed, size=self.count) + 1.0
        for angle, speed in zip(angles.tolist(), speeds.tolist(), strict=True):
            velocity = Point(math.cos(angle) * speed, math.sin(angle) * speed)
            self.particles.append(Particle(origin, velocity, self.lifespan, color))

    def update(self) -> None:
        """Advance every particle one tick and discard the expired ones."""
        for p in self.particles:
            p.update()
        self.particles = [p for p in self.particles if p.alive]

    def clear(self) -> None:
        self.particles.clear()

    def to_list(self) -> list[dict]:
        return [p.to_dict() for p in self.particles]
