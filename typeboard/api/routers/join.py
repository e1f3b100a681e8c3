"""Join endpoints: form post and JSON API."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from ...context import AppContext, get_context
from ...core.errors import BadInput, TooManyAttempts
from ...models import JoinOutcome, JoinRequest, JoinStatus
from ...services.region import request_ip

router = APIRouter(tags=["join"])


async def _run_join(
    request: Request, ctx: AppContext, payload: JoinRequest
) -> Optional[JoinOutcome]:
    """Apply the cooldown and region gate, then run the workflow.

    Returns ``None`` when the client is still cooling down.
    """

    if not ctx.join_throttle.attempt(request_ip(request)):
        return None
    admitted = await ctx.region_gate.is_admitted(request)
    outcome = await ctx.workflow.join(payload.username, payload.credential, admitted=admitted)
    if outcome.ok:
        request.session["user"] = {"username": outcome.username}
    return outcome


@router.post("/join")
async def join_form(
    request: Request,
    username: str = Form(""),
    credential: str = Form(""),
    ctx: AppContext = Depends(get_context),
):
    """Handle the join form submit."""

    outcome = await _run_join(
        request, ctx, JoinRequest(username=username, credential=credential)
    )
    if outcome is None:
        return PlainTextResponse(TooManyAttempts.message, status_code=TooManyAttempts.status_code)
    if outcome.ok:
        return RedirectResponse("/", status_code=302)
    return PlainTextResponse(outcome.message, status_code=outcome.http_status)


@router.post("/api/join")
async def join_api(request: Request, ctx: AppContext = Depends(get_context)):
    """JSON variant of the join flow."""

    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        rejected = JoinOutcome(status=JoinStatus.REJECTED_BAD_INPUT, message=BadInput.message)
        return JSONResponse(
            {"ok": False, "error": rejected.message}, status_code=rejected.http_status
        )

    payload = JoinRequest(
        username=str(body.get("username") or ""),
        credential=str(body.get("credential") or ""),
    )
    outcome = await _run_join(request, ctx, payload)
    if outcome is None:
        return JSONResponse(
            {"ok": False, "error": TooManyAttempts.message},
            status_code=TooManyAttempts.status_code,
        )
    if not outcome.ok:
        return JSONResponse(
            {"ok": False, "error": outcome.message}, status_code=outcome.http_status
        )

    result: Dict[str, Any] = {"ok": True, "username": outcome.username}
    if outcome.status is JoinStatus.SUCCESS_CREATED:
        result["created"] = True
    else:
        result["relogin"] = True
    return result


__all__ = ["router"]
