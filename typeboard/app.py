"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .api import register_routes
from .context import AppContext, build_context
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    REFRESH_ENABLED,
    SECRET_KEY,
    get_logger,
)

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: AppContext = app.state.context
    if app.state.refresh_enabled:
        context.sweep.start()
        logger.info(
            "Refresh sweep every %.0f seconds", context.sweep.interval_seconds
        )
    try:
        yield
    finally:
        await context.sweep.stop()


def create_app(
    context: Optional[AppContext] = None,
    *,
    refresh_enabled: bool = REFRESH_ENABLED,
) -> FastAPI:
    app = FastAPI(title="Typing Leaderboard API", version="0.3.0", lifespan=lifespan)
    app.state.context = context or build_context()
    app.state.refresh_enabled = refresh_enabled

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="sid",
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("typeboard.app:app", host="127.0.0.1", port=3000, reload=True)
