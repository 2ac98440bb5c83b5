from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_ASK_URL = "https://ask.defang.io/v1/ask"


@dataclass
class Config:
    discord_app_id: str
    discord_token: str
    ask_token: str
    ask_url: str = DEFAULT_ASK_URL
    ask_timeout_seconds: float = 60.0
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    # Cadence of the "still working" animation while an answer is pending
    progress_interval_ms: int = 500
    # Discord rejects message content longer than this
    message_limit: int = 2000


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_config() -> Config:
    load_dotenv(override=False)

    # The original deployment used APP_ID / BOT_TOKEN; accept both spellings
    discord_app_id = (os.getenv("DISCORD_APP_ID") or os.getenv("APP_ID") or "").strip()
    discord_token = (os.getenv("DISCORD_TOKEN") or os.getenv("BOT_TOKEN") or "").strip()
    ask_token = os.getenv("ASK_TOKEN", "").strip()

    if not discord_app_id:
        raise RuntimeError("DISCORD_APP_ID is required in environment or .env")
    if not discord_token:
        raise RuntimeError("DISCORD_TOKEN is required in environment or .env")
    if not ask_token:
        raise RuntimeError("ASK_TOKEN is required in environment or .env")

    # Handle log_level - use default if empty
    log_level = os.getenv("LOG_LEVEL", "").strip()
    if not log_level:
        log_level = "INFO"

    port = _int_env("PORT", 3000)
    if port <= 0 or port > 65535:
        port = 3000

    interval_ms = _int_env("PROGRESS_INTERVAL_MS", 500)
    if interval_ms <= 0:
        interval_ms = 500

    message_limit = _int_env("MESSAGE_LIMIT", 2000)
    if message_limit <= 0 or message_limit > 2000:
        message_limit = 2000

    return Config(
        discord_app_id=discord_app_id,
        discord_token=discord_token,
        ask_token=ask_token,
        ask_url=os.getenv("ASK_URL", DEFAULT_ASK_URL).strip() or DEFAULT_ASK_URL,
        ask_timeout_seconds=_float_env("ASK_TIMEOUT_SECONDS", 60.0),
        host=os.getenv("HOST", "0.0.0.0").strip() or "0.0.0.0",
        port=port,
        log_level=log_level,
        progress_interval_ms=interval_ms,
        message_limit=message_limit,
    )
