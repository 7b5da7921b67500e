"""Local game session: owns the match and runs the async frame loop."""

from __future__ import annotations

import asyncio
import json
import logging
import time

from starlette.websockets import WebSocket, WebSocketState

from snake_duel.config import GameConfig
from snake_duel.driver import FrameDriver, KeyboardState
from snake_duel.match import Match, MatchStateMachine

logger = logging.getLogger(__name__)


class FrameBuffer:
    """Renderer that keeps the most recent frame for broadcasting."""

    def __init__(self) -> None:
        self.latest: dict | None = None

    def render(self, frame: dict) -> None:
        self.latest = frame


class EventQueue:
    """Score sink that queues score and result events for clients."""

    def __init__(self) -> None:
        self.pending: list[dict] = []

    def score_changed(self, player_id: int, score: int) -> None:
        self.pending.append({"type": "score", "player_id": player_id, "score": score})

    def match_finished(self, winner_name: str) -> None:
        self.pending.append({"type": "result", "winner": winner_name})

    def drain(self) -> list[dict]:
        events, self.pending = self.pending, []
        return events


class GameSession:
    """One two-player session sharing a single keyboard.

    Clients only latch keys or trigger menu actions; all simulation happens
    inside the frame loop task.
    """

    def __init__(self, config: GameConfig | None = None) -> None:
        self.config = config or GameConfig()
        self.match = Match(self.config)
        self.machine = MatchStateMachine(self.match)
        self.keyboard = KeyboardState(self.config.key_bindings)
        self.frames = FrameBuffer()
        self.events = EventQueue()
        self.driver = FrameDriver(
            self.machine, self.keyboard, self.frames, self.events,
        )
        self.clients: list[WebSocket] = []
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the frame loop, replacing any loop already scheduled."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self._frame_loop())
        logger.info("Frame loop started at %d fps.", self.config.frame_rate)

    async def stop(self) -> None:
        """Cancel the frame loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.info("Frame loop stopped.")

    async def _frame_loop(self) -> None:
        interval = 1.0 / self.config.frame_rate
        try:
            while True:
                self.driver.run_frame(time.monotonic())
                for event in self.events.drain():
                    await self._broadcast(event)
                if self.frames.latest is not None:
                    await self._broadcast({"type": "frame", **self.frames.latest})
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Frame loop cancelled.")
        except Exception:
            logger.exception("Frame loop error; loop stopped.")

    async def _broadcast(self, message: dict) -> None:
        """Send a message to every connected client, dropping dead sockets."""
        payload = json.dumps(message, separators=(",", ":"))
        dead: list[WebSocket] = []
        # Iterate over a snapshot so disconnect handlers can mutate the list.
        for ws in list(self.clients):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                logger.warning("Dropping client after failed send.")
                dead.append(ws)
        for ws in dead:
            if ws in self.clients:
                self.clients.remove(ws)

    # --- actions --------------------------------------------------------

    def snapshot(self) -> dict:
        return self.machine.snapshot(time.monotonic())

    def toggle_ready(self, player_id: int) -> bool:
        return self.machine.toggle_ready(player_id, time.monotonic())

    def rematch(self) -> None:
        self.machine.rematch(time.monotonic())

    def return_to_menu(self) -> None:
        self.machine.return_to_menu(time.monotonic())
        self.keyboard.clear()
