"""Reply-then-edit access to one interaction's original response."""
from __future__ import annotations

from typing import Any

import discord

from .discord_client import DiscordClient


EPHEMERAL_FLAG = discord.MessageFlags(ephemeral=True).value


def message_body(
    content: str,
    components: list[dict[str, Any]] | None = None,
    ephemeral: bool = False,
) -> dict[str, Any]:
    # An explicit empty list clears any buttons left on the message
    body: dict[str, Any] = {"content": content, "components": components or []}
    if ephemeral:
        body["flags"] = EPHEMERAL_FLAG
    return body


class ContinuationRelay:
    """Holds the continuation token of one interaction.

    The initial response goes back as the HTTP reply and can only happen
    once; every later change is a PATCH of ``@original`` through the
    webhook API. Patches are not sequenced here: callers issue them in the
    order they want them applied.
    """

    def __init__(self, client: DiscordClient, token: str) -> None:
        self.client = client
        self.token = token
        self._initial_sent = False

    @property
    def initial_sent(self) -> bool:
        return self._initial_sent

    def _mark_initial(self) -> None:
        if self._initial_sent:
            raise RuntimeError("initial response already sent for this interaction")
        self._initial_sent = True

    def send_initial(
        self,
        content: str,
        components: list[dict[str, Any]] | None = None,
        ephemeral: bool = False,
        response_type: discord.InteractionResponseType = discord.InteractionResponseType.channel_message,
    ) -> dict[str, Any]:
        """Build the interaction response body; at most once per relay."""
        self._mark_initial()
        return {
            "type": response_type.value,
            "data": message_body(content, components, ephemeral=ephemeral),
        }

    def defer_update(self) -> dict[str, Any]:
        """Acknowledge a component click now and edit its message later."""
        self._mark_initial()
        return {"type": discord.InteractionResponseType.deferred_message_update.value}

    async def patch(self, content: str, components: list[dict[str, Any]] | None = None) -> Any:
        return await self.client.edit_original(self.token, message_body(content, components))
