"""End-to-end match scenarios."""

import math

import pytest

from snake_duel.cli import simulate
from snake_duel.collision import LossCause
from snake_duel.config import GameConfig, TieBreakPolicy
from snake_duel.driver import ControlState, FrameDriver, LoggingScoreSink, NullRenderer
from snake_duel.geometry import Point
from snake_duel.match import Match, MatchState, MatchStateMachine
from snake_duel.snake import Snake


class FixedInput:
    def __init__(self, controls):
        self.controls = controls

    def snapshot(self):
        return self.controls


def _running_driver(config, controls=ControlState()):
    match = Match(config)
    machine = MatchStateMachine(match)
    driver = FrameDriver(machine, FixedInput(controls), NullRenderer(), LoggingScoreSink())
    machine.set_ready(1, True, 0.0)
    machine.set_ready(2, True, 0.0)
    assert machine.update(config.start_delay) is MatchState.RUNNING
    return driver


class TestWallScenario:
    def test_player_one_runs_into_right_wall(self):
        cfg = GameConfig(seed=0)
        # Player 2 circles in the top half, clear of player 1's row.
        driver = _running_driver(cfg, ControlState(p2_right=True))
        match = driver.match
        match.player2 = Snake.from_config(cfg, Point(400, 150), 0.0, 1)
        match.food.position = Point(700, 550)

        ticks = 0
        while match.state is MatchState.RUNNING and ticks < 326:
            driver.step(now=float(ticks))
            ticks += 1

        assert match.state is MatchState.ENDING
        assert match.tick == 321
        assert match.player1.head.x > cfg.width - cfg.wall_thickness
        assert match.result.winner is match.player2
        assert match.result.loser is match.player1

        frozen_head = match.player1.head
        driver.step(now=400.0)
        assert match.player1.head == frozen_head

    def test_wall_loss_cause_recorded(self):
        cfg = GameConfig(seed=0)
        driver = _running_driver(cfg)
        match = driver.match
        match.player1 = Snake.from_config(cfg, Point(400, 11), -math.pi / 2, 0)
        match.food.position = Point(700, 550)
        report = driver.step(now=0.0)
        assert report.outcome.losses[0] == (match.player1, LossCause.WALL)


class TestBodyLength:
    def test_length_monotonic_and_bounded(self):
        cfg = GameConfig(seed=11)
        driver = _running_driver(cfg, ControlState(p1_right=True, p2_left=True))
        match = driver.match
        prev = [cfg.initial_length, cfg.initial_length]
        for tick in range(600):
            if match.state is not MatchState.RUNNING:
                break
            driver.step(now=float(tick))
            for i, snake in enumerate(match.snakes):
                length = len(snake.body)
                assert length >= prev[i]
                assert length <= cfg.initial_length + snake.score * cfg.growth_factor
                prev[i] = length


class TestHeadOn:
    def test_straight_head_on_is_a_draw(self):
        match = simulate(GameConfig(seed=5), ticks=1000)
        assert match.state is MatchState.ENDING
        assert match.result.winner_name == "DRAW"
        assert match.result.tick == 124

    def test_first_checked_policy_hands_player_two_the_win(self):
        cfg = GameConfig(seed=5, tie_break=TieBreakPolicy.FIRST_CHECKED)
        match = simulate(cfg, ticks=1000)
        assert match.result.winner_name == "PLAYER 2"
        assert match.result.losers == (match.player1,)


class TestReadyToRunning:
    def test_both_ready_same_tick(self):
        cfg = GameConfig(start_delay=1.0, seed=0)
        match = Match(cfg)
        machine = MatchStateMachine(match)
        machine.set_ready(1, True, 10.0)
        machine.set_ready(2, True, 10.0)
        assert machine.update(10.5) is None
        assert machine.update(11.0) is MatchState.RUNNING
        for snake in match.snakes:
            assert len(snake.body) == 15
            assert snake.score == 0


@pytest.mark.parametrize("turn", [-1, 1])
def test_circling_snakes_survive_without_food(turn):
    cfg = GameConfig(seed=2)
    controls = ControlState(
        p1_left=turn < 0, p1_right=turn > 0, p2_left=turn < 0, p2_right=turn > 0,
    )
    driver = _running_driver(cfg, controls)
    match = driver.match
    for tick in range(300):
        match.food.position = Point(700, 550)
        driver.step(now=float(tick))
    assert match.state is MatchState.RUNNING
