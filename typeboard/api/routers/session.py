"""Session status and logout endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

router = APIRouter(tags=["session"])


@router.get("/api/session")
def get_session_state(request: Request):
    user = request.session.get("user") or {}
    username = user.get("username") if isinstance(user, dict) else None
    return {"loggedIn": bool(username), "username": username}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=302)


@router.post("/api/logout")
def api_logout(request: Request):
    request.session.clear()
    return JSONResponse({"ok": True})


__all__ = ["router"]
