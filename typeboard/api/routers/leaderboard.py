"""Leaderboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...context import AppContext, get_context
from ...services.leaderboard import rank_profiles

router = APIRouter(tags=["leaderboard"])


@router.get("/api/leaderboard")
async def get_leaderboard(ctx: AppContext = Depends(get_context)):
    """Ranked profiles for the admitted region."""

    profiles = await ctx.profiles.load_all()
    return {
        "users": [profile.public_dict() for profile in rank_profiles(profiles, ctx.region)]
    }


__all__ = ["router"]
