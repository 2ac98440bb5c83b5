"""FastAPI app serving the Discord interactions endpoint, and the server entry point."""
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from .config import Config, load_config
from .dispatcher import DispatchSettings, InteractionDispatcher
from .logging import setup_logging
from .models.interaction import Interaction
from .services.answer_client import AnswerClient, AnswerConfig
from .services.discord_client import DiscordClient, DiscordConfig
from .services.pagination import PageStore
from .services.sessions import SessionRegistry


log = logging.getLogger(__name__)


def build_dispatcher(cfg: Config) -> InteractionDispatcher:
    discord_client = DiscordClient(DiscordConfig(app_id=cfg.discord_app_id, bot_token=cfg.discord_token))
    answers = AnswerClient(
        AnswerConfig(url=cfg.ask_url, token=cfg.ask_token, timeout_seconds=cfg.ask_timeout_seconds)
    )
    return InteractionDispatcher(
        discord_client,
        answers,
        sessions=SessionRegistry(),
        pages=PageStore(),
        settings=DispatchSettings(
            progress_interval_seconds=cfg.progress_interval_ms / 1000.0,
            message_limit=cfg.message_limit,
        ),
    )


def create_app(dispatcher: InteractionDispatcher | None = None, cfg: Config | None = None) -> FastAPI:
    """Build the interactions web app.

    When no dispatcher is given one is built from ``cfg`` (or the
    environment) and its HTTP clients are closed on shutdown.
    """
    owns_clients = dispatcher is None
    if dispatcher is None:
        dispatcher = build_dispatcher(cfg or load_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("askbot interactions endpoint ready")
        try:
            yield
        finally:
            if owns_clients:
                await dispatcher.answers.aclose()
                await dispatcher.discord.aclose()

    app = FastAPI(title="askbot", lifespan=lifespan)
    app.state.dispatcher = dispatcher

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    @app.post("/interactions")
    async def interactions(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        try:
            payload = await request.json()
            interaction = Interaction.model_validate(payload)
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning("Invalid interaction payload: %s", e)
            return JSONResponse({"error": "invalid interaction"}, status_code=400)

        result = dispatcher.dispatch(interaction)
        if result.followup is not None:
            # Starlette runs background tasks after the response is sent,
            # so the placeholder always reaches Discord before any edit.
            background_tasks.add_task(result.followup)
        return JSONResponse(result.body, status_code=result.status_code)

    return app


def main() -> None:
    cfg = load_config()
    logs_dir = setup_logging(cfg.log_level)
    log.info("Starting askbot on %s:%s (logs in %s)", cfg.host, cfg.port, logs_dir)

    # log_config=None keeps the handlers installed by setup_logging
    uvicorn.run(create_app(cfg=cfg), host=cfg.host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
