"""REST API route handlers for readiness and match actions."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from snake_duel.errors import InvalidTransitionError
from snake_duel.match import PLAYER_IDS
from snake_duel.server.models import ActionResponse, ErrorResponse, ReadyResponse
from snake_duel.server.session import GameSession

router = APIRouter(tags=["match"])

_CONFLICT = {
    409: {"model": ErrorResponse, "description": "Not allowed in the current state."},
}


def _get_session(request: Request) -> GameSession:
    return request.app.state.session


def _action_response(session: GameSession) -> ActionResponse:
    return ActionResponse(
        state=session.match.state.value,
        ready={str(pid): flag for pid, flag in session.match.ready.items()},
    )


@router.get("/state")
async def get_state(request: Request) -> dict:
    """Full match snapshot."""
    return _get_session(request).snapshot()


@router.get("/config")
async def get_config(request: Request) -> dict:
    """The session's game configuration."""
    return _get_session(request).config.to_dict()


@router.post(
    "/players/{player_id}/ready",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown player."},
        **_CONFLICT,
    },
)
async def toggle_ready(player_id: int, request: Request) -> ReadyResponse:
    """Toggle a player's readiness."""
    if player_id not in PLAYER_IDS:
        raise HTTPException(status_code=404, detail="Player not found.")
    session = _get_session(request)
    try:
        ready = session.toggle_ready(player_id)
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ReadyResponse(
        player_id=player_id,
        ready=ready,
        counting_down=session.machine.is_counting_down,
    )


@router.post("/match/rematch", responses=_CONFLICT)
async def rematch(request: Request) -> ActionResponse:
    """Start a rematch once the lockout window has passed."""
    session = _get_session(request)
    try:
        session.rematch()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _action_response(session)


@router.post("/match/menu", responses=_CONFLICT)
async def return_to_menu(request: Request) -> ActionResponse:
    """Return to the menu once the lockout window has passed."""
    session = _get_session(request)
    try:
        session.return_to_menu()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _action_response(session)
