"""System-level API endpoints."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Liveness endpoint; answers whenever the process is up."""

    return JSONResponse({"ok": True})


__all__ = ["router"]
