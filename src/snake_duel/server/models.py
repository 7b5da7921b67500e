"""Pydantic models for API request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReadyResponse(BaseModel):
    """Response for POST /players/{player_id}/ready."""

    player_id: int
    ready: bool
    counting_down: bool


class ActionResponse(BaseModel):
    """Response for the cooldown actions (rematch / menu)."""

    state: str
    ready: dict[str, bool]


class KeyMessage(BaseModel):
    """Key event sent by a client over the play socket."""

    key: str = Field(min_length=1, max_length=32)
    pressed: bool


class ReadyMessage(BaseModel):
    """Readiness toggle sent by a client over the play socket."""

    ready: int


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    detail: str
