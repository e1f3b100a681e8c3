"""HTTP surface of the leaderboard service."""

from __future__ import annotations

from fastapi import FastAPI

from ..core.log import get_logger
from .routers import ALL_ROUTERS

logger = get_logger("api")


def register_routes(app: FastAPI) -> None:
    """Mount the system, leaderboard, join, session and admin routers."""

    for router in ALL_ROUTERS:
        app.include_router(router)
    logger.debug("Mounted %d routers", len(ALL_ROUTERS))


__all__ = ["register_routes"]
