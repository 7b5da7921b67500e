"""WebSocket handler for real-time play."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from snake_duel.errors import InvalidTransitionError
from snake_duel.server.models import KeyMessage, ReadyMessage
from snake_duel.server.session import GameSession

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_session(ws: WebSocket) -> GameSession:
    return ws.app.state.session


@ws_router.websocket("/play")
async def play(websocket: WebSocket) -> None:
    """Shared-keyboard socket: send key events, receive frames and events."""
    session = _get_session(websocket)
    await websocket.accept()
    session.clients.append(websocket)
    logger.info("Client connected (%d total).", len(session.clients))

    # Send an initial snapshot so the client gets immediate feedback.
    await websocket.send_text(
        json.dumps({"type": "frame", **session.snapshot()}, separators=(",", ":")),
    )

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            if "key" in msg:
                try:
                    key_msg = KeyMessage.model_validate(msg)
                except ValidationError:
                    continue
                session.keyboard.set_key(key_msg.key, key_msg.pressed)
            elif "ready" in msg:
                try:
                    ready_msg = ReadyMessage.model_validate(msg)
                    session.toggle_ready(ready_msg.ready)
                except ValidationError:
                    continue
                except InvalidTransitionError as exc:
                    await websocket.send_text(
                        json.dumps({"type": "error", "detail": str(exc)}),
                    )
    except WebSocketDisconnect:
        logger.info("Client disconnected.")
    finally:
        if websocket in session.clients:
            session.clients.remove(websocket)
