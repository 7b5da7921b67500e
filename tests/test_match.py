"""Tests for the match aggregate and state machine."""

import pytest

from snake_duel.collision import CollisionOutcome, LossCause
from snake_duel.config import GameConfig
from snake_duel.errors import InvalidTransitionError
from snake_duel.match import Match, MatchState, MatchStateMachine


@pytest.fixture()
def machine(sink):
    return MatchStateMachine(Match(GameConfig(seed=0)), sink)


def _start(machine, now=0.0):
    machine.set_ready(1, True, now)
    machine.set_ready(2, True, now)
    assert machine.update(now + machine.config.start_delay) is MatchState.RUNNING
    return now + machine.config.start_delay


def _p1_loses(machine):
    m = machine.match
    return CollisionOutcome(m.player2, m.player1, ((m.player1, LossCause.WALL),))


def _to_cooldown(machine, now=0.0):
    t = _start(machine, now)
    machine.report(_p1_loses(machine), t)
    t += machine.config.ending_delay
    assert machine.update(t) is MatchState.COOLDOWN
    return t


class TestMatchInit:
    def test_initial_state(self):
        match = Match()
        assert match.state is MatchState.IDLE
        assert match.ready == {1: False, 2: False}
        assert match.generation == 0
        assert match.result is None

    def test_spawn_layout(self):
        match = Match(GameConfig())
        assert match.player1.head == (150, 300)
        assert match.player1.heading == 0.0
        assert match.player2.head.x == pytest.approx(650)
        assert match.player2.head.y == pytest.approx(300)
        assert match.player1.name == "PLAYER 1"
        assert match.player2.name == "PLAYER 2"

    def test_player_id(self):
        match = Match()
        assert match.player_id(match.player1) == 1
        assert match.player_id(match.player2) == 2

    def test_to_dict(self):
        d = Match().to_dict()
        assert d["state"] == "idle"
        assert d["ready"] == {"1": False, "2": False}
        assert len(d["snakes"]) == 2
        assert d["result"] is None


class TestReadiness:
    def test_one_player_ready_does_not_arm(self, machine):
        machine.set_ready(1, True, 0.0)
        assert not machine.is_counting_down
        assert machine.update(100.0) is None

    def test_both_ready_arms_start(self, machine):
        machine.set_ready(1, True, 0.0)
        machine.set_ready(2, True, 0.0)
        assert machine.is_counting_down
        assert machine.update(0.999) is None
        assert machine.state is MatchState.IDLE

    def test_starts_after_exact_delay(self, machine):
        machine.set_ready(1, True, 5.0)
        machine.set_ready(2, True, 5.0)
        assert machine.update(6.0) is MatchState.RUNNING
        assert not machine.is_counting_down

    def test_unready_cancels_start(self, machine):
        machine.toggle_ready(1, 0.0)
        machine.toggle_ready(2, 0.0)
        assert machine.toggle_ready(2, 0.5) is False
        assert not machine.is_counting_down
        assert machine.update(2.0) is None
        assert machine.state is MatchState.IDLE

    def test_unknown_player(self, machine):
        with pytest.raises(InvalidTransitionError, match="Unknown player"):
            machine.toggle_ready(3, 0.0)

    def test_readiness_locked_while_running(self, machine):
        _start(machine)
        with pytest.raises(InvalidTransitionError, match="idle"):
            machine.set_ready(1, False, 2.0)


class TestMatchStart:
    def test_fresh_entities(self, machine):
        match = machine.match
        old_p1 = match.player1
        _start(machine)
        assert match.player1 is not old_p1
        for snake in match.snakes:
            assert len(snake.body) == 15
            assert snake.score == 0
        assert match.generation == 1
        assert match.tick == 0


class TestEnding:
    def test_report_freezes_and_explodes(self, machine):
        t = _start(machine)
        machine.report(_p1_loses(machine), t)
        match = machine.match
        assert match.state is MatchState.ENDING
        assert len(match.particles) == match.config.particle_count
        assert match.result.winner is match.player2
        assert match.result.winner_name == "PLAYER 2"

    def test_report_outside_running(self, machine):
        with pytest.raises(InvalidTransitionError):
            machine.report(_p1_loses(machine), 0.0)

    def test_cooldown_after_ending_delay(self, machine, sink):
        t = _start(machine)
        machine.report(_p1_loses(machine), t)
        assert machine.update(t + 1.99) is None
        assert sink.results == []
        assert machine.update(t + 2.0) is MatchState.COOLDOWN
        assert sink.results == ["PLAYER 2"]

    def test_draw_published(self, machine, sink):
        t = _start(machine)
        m = machine.match
        outcome = CollisionOutcome(
            None, None,
            ((m.player1, LossCause.OPPONENT), (m.player2, LossCause.OPPONENT)),
        )
        machine.report(outcome, t)
        assert len(m.particles) == 2 * m.config.particle_count
        machine.update(t + 2.0)
        assert sink.results == ["DRAW"]
        assert m.result.to_dict()["losers"] == ["PLAYER 1", "PLAYER 2"]


class TestCooldown:
    def test_actions_locked_during_lockout(self, machine):
        t = _to_cooldown(machine)
        assert not machine.actions_enabled(t + 29.9)
        with pytest.raises(InvalidTransitionError, match="locked"):
            machine.rematch(t + 29.9)
        with pytest.raises(InvalidTransitionError, match="locked"):
            machine.return_to_menu(t)

    def test_actions_outside_cooldown(self, machine):
        with pytest.raises(InvalidTransitionError, match="idle"):
            machine.return_to_menu(0.0)

    def test_return_to_menu(self, machine):
        t = _to_cooldown(machine) + 30.0
        assert machine.actions_enabled(t)
        machine.return_to_menu(t)
        assert machine.state is MatchState.IDLE
        assert machine.match.ready == {1: False, 2: False}
        assert not machine.is_counting_down

    @pytest.mark.parametrize("score", [0, 1, 7])
    def test_return_to_menu_regardless_of_score(self, machine, score):
        t = _start(machine)
        machine.match.player1.score = score
        machine.report(_p1_loses(machine), t)
        machine.update(t + 2.0)
        machine.return_to_menu(t + 32.0)
        assert machine.state is MatchState.IDLE
        assert machine.match.ready == {1: False, 2: False}

    def test_rematch_rearms_start(self, machine):
        t = _to_cooldown(machine) + 30.0
        machine.rematch(t)
        assert machine.state is MatchState.IDLE
        assert machine.match.ready == {1: True, 2: True}
        assert machine.is_counting_down
        assert machine.update(t + 1.0) is MatchState.RUNNING
        assert machine.match.generation == 2
        assert all(s.score == 0 for s in machine.match.snakes)


class TestSnapshot:
    def test_countdown(self, machine):
        machine.set_ready(1, True, 0.0)
        machine.set_ready(2, True, 0.0)
        snap = machine.snapshot(0.25)
        assert snap["countdown"] == pytest.approx(0.75)
        assert snap["actions_enabled"] is False

    def test_lockout_remaining(self, machine):
        t = _to_cooldown(machine)
        snap = machine.snapshot(t + 10.0)
        assert snap["state"] == "cooldown"
        assert snap["lockout_remaining"] == pytest.approx(20.0)
        assert snap["result"]["winner"] == "PLAYER 2"
