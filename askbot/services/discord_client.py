from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter


log = logging.getLogger(__name__)


DISCORD_API_BASE_URL = "https://discord.com/api/v10"


@dataclass
class DiscordConfig:
    app_id: str
    bot_token: str
    timeout_seconds: float = 10.0


class DiscordAPIError(Exception):
    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"Discord API error {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class DiscordClient:
    """Thin REST client for interaction webhooks and command installation."""

    def __init__(self, cfg: DiscordConfig) -> None:
        self.cfg = cfg
        self._client = httpx.AsyncClient(
            base_url=DISCORD_API_BASE_URL,
            headers={
                "Authorization": f"Bot {cfg.bot_token}",
                "Content-Type": "application/json",
                "User-Agent": "DiscordBot (askbot, 1.0)",
            },
            timeout=cfg.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        resp = await self._client.request(method, path, json=json)
        if resp.status_code >= 400:
            log.warning("Discord %s %s failed: status=%s", method, path.split("/")[0], resp.status_code)
            raise DiscordAPIError(resp.status_code, resp.text)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _webhook_path(self, token: str, message_id: str) -> str:
        return f"webhooks/{self.cfg.app_id}/{token}/messages/{message_id}"

    async def edit_original(self, token: str, payload: dict[str, Any]) -> Any:
        """Edit the original response of the interaction that owns ``token``."""
        return await self._request("PATCH", self._webhook_path(token, "@original"), json=payload)

    async def edit_message(self, token: str, message_id: str, payload: dict[str, Any]) -> Any:
        return await self._request("PATCH", self._webhook_path(token, message_id), json=payload)

    async def delete_message(self, token: str, message_id: str) -> None:
        await self._request("DELETE", self._webhook_path(token, message_id))

    @retry(
        reraise=True,
        wait=wait_exponential_jitter(initial=1, max=8),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.TransportError)),
    )
    async def install_global_commands(self, commands: list[dict[str, Any]]) -> Any:
        """Bulk-overwrite the application's global commands.

        The PUT replaces the whole set, so retrying it is safe.
        """
        return await self._request("PUT", f"applications/{self.cfg.app_id}/commands", json=commands)
