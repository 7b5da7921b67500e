"""Frame driver: input latching, fixed-timestep simulation, render hand-off."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from snake_duel.collision import CollisionEngine, TickReport
from snake_duel.config import KeyBindings
from snake_duel.errors import MissingCollaboratorError
from snake_duel.match import MatchState, MatchStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlState:
    """Latched state of the four logical controls for one frame."""

    p1_left: bool = False
    p1_right: bool = False
    p2_left: bool = False
    p2_right: bool = False


class InputSource(Protocol):
    def snapshot(self) -> ControlState: ...


class Renderer(Protocol):
    def render(self, frame: dict) -> None: ...


class ScoreSink(Protocol):
    def score_changed(self, player_id: int, score: int) -> None: ...

    def match_finished(self, winner_name: str) -> None: ...


class KeyboardState:
    """Latches key-down/key-up events into the four logical controls."""

    def __init__(self, bindings: KeyBindings | None = None) -> None:
        self.bindings = bindings or KeyBindings()
        self._pressed: set[str] = set()

    def press(self, key: str) -> None:
        self._pressed.add(key.lower())

    def release(self, key: str) -> None:
        self._pressed.discard(key.lower())

    def set_key(self, key: str, pressed: bool) -> None:
        if pressed:
            self.press(key)
        else:
            self.release(key)

    def clear(self) -> None:
        self._pressed.clear()

    def snapshot(self) -> ControlState:
        b = self.bindings
        held = self._pressed
        return ControlState(
            p1_left=b.p1_left.lower() in held,
            p1_right=b.p1_right.lower() in held,
            p2_left=b.p2_left.lower() in held,
            p2_right=b.p2_right.lower() in held,
        )


class NullRenderer:
    """Renderer that discards frames, for headless runs."""

    def render(self, frame: dict) -> None:
        pass


class LoggingScoreSink:
    """Score sink that only logs."""

    def score_changed(self, player_id: int, score: int) -> None:
        logger.info("Player %d score: %d", player_id, score)

    def match_finished(self, winner_name: str) -> None:
        logger.info("Result: %s", winner_name)


class FixedTimestep:
    """Turns wall-clock time into a whole number of fixed simulation steps.

    Leftover time carries into the next frame. When a frame owes more than
    ``max_steps`` steps the excess backlog is dropped.
    """

    def __init__(self, interval: float, max_steps: int = 5) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1.")
        self.interval = interval
        self.max_steps = max_steps
        self.accumulator = 0.0
        self._last: float | None = None

    def reset(self, now: float) -> None:
        """Forget accumulated time; the next step is due one interval after *now*."""
        self.accumulator = 0.0
        self._last = now

    def advance(self, now: float) -> int:
        """Account for time up to *now* and return the number of due steps."""
        if self._last is None:
            self._last = now
            return 0
        self.accumulator += max(0.0, now - self._last)
        self._last = now

        steps = int(self.accumulator // self.interval)
        if steps > self.max_steps:
            logger.warning(
                "Simulation fell behind by %d steps; dropping backlog.",
                steps - self.max_steps,
            )
            steps = self.max_steps
            self.accumulator = 0.0
        else:
            self.accumulator -= steps * self.interval
        return steps


class FrameDriver:
    """Sequences one frame: input, deadlines, simulation steps, render.

    The driver owns no game rules; it calls into the snakes, the collision
    engine and the state machine in a fixed order.
    """

    def __init__(
        self,
        machine: MatchStateMachine,
        input_source: InputSource,
        renderer: Renderer,
        score_sink: ScoreSink,
    ) -> None:
        for name, collaborator in (
            ("machine", machine),
            ("input_source", input_source),
            ("renderer", renderer),
            ("score_sink", score_sink),
        ):
            if collaborator is None:
                raise MissingCollaboratorError(f"FrameDriver requires a {name}.")
        self.machine = machine
        self.match = machine.match
        self.input_source = input_source
        self.renderer = renderer
        self.score_sink = score_sink
        machine.score_sink = score_sink
        self.collision = CollisionEngine(self.match.config)
        self.timestep = FixedTimestep(
            self.match.config.tick_interval,
            self.match.config.max_steps_per_frame,
        )

    def step(self, controls: ControlState | None = None, now: float | None = None) -> TickReport | None:
        """Run exactly one simulation tick.

        Returns the collision report when the snakes moved, else ``None``.
        """
        now = time.monotonic() if now is None else now
        match = self.match
        report = None
        if match.state is MatchState.RUNNING:
            controls = controls if controls is not None else self.input_source.snapshot()
            match.player1.set_turn(controls.p1_left, controls.p1_right)
            match.player2.set_turn(controls.p2_left, controls.p2_right)
            for snake in match.snakes:
                snake.advance()
            match.tick += 1

            report = self.collision.resolve(match.player1, match.player2, match.food)
            for snake in report.eaten:
                self.score_sink.score_changed(match.player_id(snake), snake.score)
            if report.outcome is not None:
                self.machine.report(report.outcome, now)
        match.particles.update()
        return report

    def run_frame(self, now: float | None = None) -> int:
        """Advance the game to *now* and render once. Returns the steps run."""
        now = time.monotonic() if now is None else now
        if self.machine.update(now) is MatchState.RUNNING:
            self.timestep.reset(now)

        steps = self.timestep.advance(now)
        controls = None
        for _ in range(steps):
            # Keys are latched once per frame, and only while the snakes move.
            if controls is None and self.match.state is MatchState.RUNNING:
                controls = self.input_source.snapshot()
            self.step(controls, now)

        self.renderer.render(self.machine.snapshot(now))
        return steps
