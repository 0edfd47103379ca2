"""HTTP transport: a FastAPI app that receives Slack slash commands."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from glt import __version__
from glt.config import GltConfig
from glt.errors import GltError, InvalidTokenError
from glt.slack.dispatcher import CommandDispatcher
from glt.slack.models import SlashCommandRequest
from glt.worklog.clock import Clock, SystemClock
from glt.worklog.store import SessionStore
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


async def error_handler_middleware(request: Request, call_next):
    """Turn unexpected failures into JSON 500s so the server keeps running."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unexpected error handling %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def create_app(config: GltConfig, clock: Clock | None = None) -> FastAPI:
    """Build the app for one configured data root.

    Raises:
        ConfigError: If the data directory or timezone is invalid.
    """
    root = config.data_root()
    dispatcher = CommandDispatcher(
        root,
        clock or SystemClock(config.clock.timezone),
        verification_token=config.slack.verification_token,
    )
    store = SessionStore(root)
    if not config.slack.is_configured:
        logger.warning("No verification token configured; every request will be rejected")

    app = FastAPI(
        title="glt",
        description="Daily work session log driven by Slack slash commands",
        version=__version__,
    )
    app.state.dispatcher = dispatcher
    app.middleware("http")(error_handler_middleware)

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(request: Request, exc: InvalidTokenError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": "Invalid token"})

    @app.exception_handler(GltError)
    async def glt_error_handler(request: Request, exc: GltError) -> JSONResponse:
        logger.error("Command failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/health")
    async def health_check() -> dict:
        return {"status": "healthy", "version": __version__, "session_open": store.exists()}

    @app.post(config.slack.route)
    async def command_request(request: Request) -> JSONResponse:
        form = await request.form()
        try:
            payload = SlashCommandRequest.model_validate(
                {key: value for key, value in form.items() if isinstance(value, str)}
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="Malformed slash command payload") from exc
        response = await run_in_threadpool(dispatcher.handle_request, payload)
        return JSONResponse(content=response.model_dump(mode="json"))

    return app
