"""Aggregate API routers."""

from fastapi import APIRouter

from .admin import router as admin_router
from .join import router as join_router
from .leaderboard import router as leaderboard_router
from .session import router as session_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    leaderboard_router,
    join_router,
    session_router,
    admin_router,
)

__all__ = ["ALL_ROUTERS"]
