"""Administrative endpoints."""

from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from ...context import AppContext, get_context
from ...core import ADMIN_PASS, ADMIN_USER, get_logger

router = APIRouter(prefix="/api/admin", tags=["admin"])
security = HTTPBasic()
logger = get_logger("api.admin")


def require_admin(credentials: HTTPBasicCredentials = Depends(security)) -> bool:
    if not ADMIN_USER or not ADMIN_PASS:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Admin access not configured")
    ok_user = secrets.compare_digest(credentials.username.encode(), ADMIN_USER.encode())
    ok_pass = secrets.compare_digest(credentials.password.encode(), ADMIN_PASS.encode())
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return True


@router.delete("/users/{username}")
async def delete_user(
    username: str,
    _: bool = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    """Remove a user's binding (both indices) and leaderboard profile."""

    deleted_binding = await ctx.credentials.delete_binding(username)
    deleted_profile = await ctx.profiles.delete(username)
    if not deleted_binding and not deleted_profile:
        raise HTTPException(404, "User not found")

    logger.info("Admin removed %s", username)
    return {
        "ok": True,
        "deleted_binding": deleted_binding,
        "deleted_profile": deleted_profile,
    }


__all__ = ["router", "require_admin"]
