"""Slash command definitions and their one-off installation."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import discord

from .config import load_config
from .logging import setup_logging
from .models.duel import CHOICES
from .services.discord_client import DiscordClient, DiscordConfig
from .templates import QUESTION_PREVIEW_LIMIT


log = logging.getLogger(__name__)


# Installable in guilds and user apps; usable in guilds, bot DMs and private channels
INTEGRATION_TYPES = [0, 1]
CONTEXTS = [0, 1, 2]

_SLASH = discord.SlashCommandOptionType


ASK_COMMAND: dict[str, Any] = {
    "name": "ask",
    "description": "Ask a question to the bot!",
    "options": [
        {
            "name": "question",
            "description": "The question you want to ask",
            "type": _SLASH.string.value,
            "required": True,
            "max_length": QUESTION_PREVIEW_LIMIT,
        }
    ],
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": CONTEXTS,
}

TEST_COMMAND: dict[str, Any] = {
    "name": "test",
    "description": "Displays Defang's official slogan with a random emoji.",
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": CONTEXTS,
}

CHALLENGE_COMMAND: dict[str, Any] = {
    "name": "challenge",
    "description": "Challenge to a match of rock paper scissors",
    "options": [
        {
            "name": "object",
            "description": "Pick your object",
            "type": _SLASH.string.value,
            "required": True,
            "choices": [{"name": c.capitalize(), "value": c} for c in CHOICES],
        }
    ],
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    # Duels need a shared channel; no DMs
    "contexts": [0, 2],
}

ALL_COMMANDS = [ASK_COMMAND, TEST_COMMAND, CHALLENGE_COMMAND]


async def install_global_commands(client: DiscordClient, commands: list[dict[str, Any]] | None = None) -> Any:
    commands = ALL_COMMANDS if commands is None else commands
    result = await client.install_global_commands(commands)
    log.info("Installed %d global commands: %s", len(commands), ", ".join(c["name"] for c in commands))
    return result


async def amain() -> None:
    cfg = load_config()
    setup_logging(cfg.log_level)
    client = DiscordClient(DiscordConfig(app_id=cfg.discord_app_id, bot_token=cfg.discord_token))
    try:
        await install_global_commands(client)
    finally:
        await client.aclose()


def main() -> None:
    asyncio.run(amain())


if __name__ == "__main__":
    main()
