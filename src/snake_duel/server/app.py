"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from snake_duel.config import GameConfig
from snake_duel.server.routes import router
from snake_duel.server.session import GameSession
from snake_duel.server.websocket import ws_router


def create_app(config: GameConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = GameSession(config)
        app.state.session = session
        session.start()
        yield
        await session.stop()

    app = FastAPI(title="Snake Duel", version="0.1.0", lifespan=lifespan)
    app.include_router(router)
    app.include_router(ws_router)
    return app
