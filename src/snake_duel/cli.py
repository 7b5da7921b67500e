"""Command-line launcher for Snake Duel."""

from __future__ import annotations

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snake-duel",
        description="Two-player continuous snake duel.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the local game server.")
    serve_p.add_argument("--host", type=str, default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    serve_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file.",
    )
    serve_p.add_argument("--seed", type=int, default=None)

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Play one headless match with constant turning.",
    )
    sim_p.add_argument("--config", type=str, default=None)
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument("--ticks", type=int, default=10_000)
    sim_p.add_argument(
        "--turn1", type=int, choices=[-1, 0, 1], default=0,
        help="Constant turn direction for player 1.",
    )
    sim_p.add_argument(
        "--turn2", type=int, choices=[-1, 0, 1], default=0,
        help="Constant turn direction for player 2.",
    )

    # --- config ---
    cfg_p = sub.add_parser("config", help="Write the default config as JSON.")
    cfg_p.add_argument("output", help="Destination path.")

    return parser


def _load_config(args: argparse.Namespace):
    from snake_duel.config import GameConfig

    config = GameConfig.load(args.config) if args.config else GameConfig()
    if args.seed is not None:
        config = config.with_overrides(seed=args.seed)
    return config


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from snake_duel.server.app import create_app

    app = create_app(_load_config(args))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


class _ConstantInput:
    def __init__(self, turn1: int, turn2: int) -> None:
        from snake_duel.driver import ControlState

        self.controls = ControlState(
            p1_left=turn1 < 0, p1_right=turn1 > 0,
            p2_left=turn2 < 0, p2_right=turn2 > 0,
        )

    def snapshot(self):
        return self.controls


def simulate(config, ticks: int, turn1: int = 0, turn2: int = 0):
    """Run one match without real time and return the finished match."""
    from snake_duel.driver import FrameDriver, LoggingScoreSink, NullRenderer
    from snake_duel.match import Match, MatchState, MatchStateMachine

    match = Match(config)
    machine = MatchStateMachine(match)
    driver = FrameDriver(
        machine, _ConstantInput(turn1, turn2), NullRenderer(), LoggingScoreSink(),
    )
    now = 0.0
    machine.set_ready(1, True, now)
    machine.set_ready(2, True, now)
    now += config.start_delay
    machine.update(now)

    for _ in range(ticks):
        if match.state is not MatchState.RUNNING:
            break
        now += config.tick_interval
        driver.step(now=now)
    return match


def _run_simulate(args: argparse.Namespace) -> int:
    config = _load_config(args)
    match = simulate(config, args.ticks, args.turn1, args.turn2)
    if match.result is None:
        print(f"No result after {match.tick} ticks.")  # noqa: T201
        return 1
    print(  # noqa: T201
        f"{match.result.winner_name} after {match.result.tick} ticks "
        f"(scores {match.result.scores[0]}-{match.result.scores[1]})"
    )
    return 0


def _run_config(args: argparse.Namespace) -> int:
    from snake_duel.config import GameConfig

    GameConfig().save(args.output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``snake-duel`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "simulate": _run_simulate,
        "config": _run_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
