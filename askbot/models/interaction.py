"""Inbound interaction payloads and custom-id encoding."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

import discord
from pydantic import BaseModel, Field


# Prefixes of the custom ids this bot puts on its own buttons and selects.
ACCEPT_PREFIX = "accept_button"
SELECT_PREFIX = "select_choice"
PAGE_PREV_PREFIX = "page_prev"
PAGE_NEXT_PREFIX = "page_next"

KNOWN_PREFIXES = (ACCEPT_PREFIX, SELECT_PREFIX, PAGE_PREV_PREFIX, PAGE_NEXT_PREFIX)

# Keys are interaction ids, i.e. Discord snowflakes
_SNOWFLAKE_RE = re.compile(r"^\d{1,20}$")


class InteractionKind(Enum):
    HANDSHAKE = "handshake"
    COMMAND = "command"
    COMPONENT = "component"
    OTHER = "other"


class MalformedCustomId(ValueError):
    """A component id that this bot could not have issued."""


class User(BaseModel):
    id: str
    username: str | None = None


class Member(BaseModel):
    user: User | None = None


class Message(BaseModel):
    id: str
    content: str | None = None


class CommandOption(BaseModel):
    name: str
    type: int | None = None
    value: Any = None


class InteractionData(BaseModel):
    # application command
    name: str | None = None
    options: list[CommandOption] = Field(default_factory=list)
    # message component
    custom_id: str | None = None
    component_type: int | None = None
    values: list[str] = Field(default_factory=list)


class Interaction(BaseModel):
    """One inbound event, as Discord posts it to the interactions endpoint."""

    id: str
    type: int
    token: str = ""
    application_id: str | None = None
    data: InteractionData | None = None
    member: Member | None = None
    user: User | None = None
    message: Message | None = None
    context: int | None = None

    @property
    def kind(self) -> InteractionKind:
        if self.type == discord.InteractionType.ping.value:
            return InteractionKind.HANDSHAKE
        if self.type == discord.InteractionType.application_command.value:
            return InteractionKind.COMMAND
        if self.type == discord.InteractionType.component.value:
            return InteractionKind.COMPONENT
        return InteractionKind.OTHER

    @property
    def actor_id(self) -> str | None:
        # User is in the member field for guilds and in user for (G)DMs
        if self.member is not None and self.member.user is not None:
            return self.member.user.id
        if self.user is not None:
            return self.user.id
        return None

    @property
    def command_name(self) -> str | None:
        return self.data.name if self.data else None

    @property
    def custom_id(self) -> str | None:
        return self.data.custom_id if self.data else None

    @property
    def message_id(self) -> str | None:
        return self.message.id if self.message else None

    def option(self, name: str) -> Any:
        if not self.data:
            return None
        for opt in self.data.options:
            if opt.name == name:
                return opt.value
        return None

    def first_option_value(self) -> Any:
        if not self.data or not self.data.options:
            return None
        return self.data.options[0].value

    @property
    def selected_value(self) -> str | None:
        if not self.data or not self.data.values:
            return None
        return self.data.values[0]


def make_custom_id(prefix: str, key: str) -> str:
    return f"{prefix}_{key}"


def parse_custom_id(custom_id: str | None) -> tuple[str, str]:
    """Split ``<prefix>_<key>`` into its parts.

    Raises:
        MalformedCustomId: If the prefix is unknown or the key is not a snowflake.
    """
    if not custom_id:
        raise MalformedCustomId("empty custom id")
    for prefix in KNOWN_PREFIXES:
        head = prefix + "_"
        if custom_id.startswith(head):
            key = custom_id[len(head):]
            if not _SNOWFLAKE_RE.match(key):
                raise MalformedCustomId(f"malformed key in custom id {custom_id!r}")
            return prefix, key
    raise MalformedCustomId(f"unknown custom id prefix in {custom_id!r}")
