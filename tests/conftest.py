"""Pytest configuration and shared fixtures."""
import random
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from askbot.dispatcher import DispatchSettings, InteractionDispatcher
from askbot.models.interaction import Interaction
from askbot.services.answer_client import AnswerClient
from askbot.services.discord_client import DiscordClient
from askbot.services.pagination import PageStore
from askbot.services.sessions import SessionRegistry


@pytest.fixture
def discord_client() -> MagicMock:
    """A DiscordClient double; its coroutine methods are AsyncMocks."""
    return MagicMock(spec=DiscordClient)


@pytest.fixture
def answers() -> MagicMock:
    """An AnswerClient double; fetch is an AsyncMock."""
    return MagicMock(spec=AnswerClient)


@pytest.fixture
def sessions() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def pages() -> PageStore:
    return PageStore()


@pytest.fixture
def dispatcher(discord_client, answers, sessions, pages) -> InteractionDispatcher:
    """Dispatcher with a fast ticker and isolated state."""
    return InteractionDispatcher(
        discord_client,
        answers,
        sessions=sessions,
        pages=pages,
        settings=DispatchSettings(progress_interval_seconds=0.01, message_limit=2000),
        rng=random.Random(7),
    )


def _actor(user_id: str, guild: bool) -> dict[str, Any]:
    # Guild interactions carry the user under member, DMs under user
    if guild:
        return {"member": {"user": {"id": user_id, "username": f"user{user_id}"}}, "context": 0}
    return {"user": {"id": user_id, "username": f"user{user_id}"}, "context": 1}


@pytest.fixture
def make_command() -> Callable[..., Interaction]:
    """Factory for application-command interactions."""

    def _make(
        name: str,
        options: list[dict[str, Any]] | None = None,
        interaction_id: str = "1001",
        user_id: str = "42",
        token: str = "tok-cmd",
        guild: bool = True,
    ) -> Interaction:
        payload: dict[str, Any] = {
            "id": interaction_id,
            "type": 2,
            "token": token,
            "application_id": "999",
            "data": {"name": name, "options": options or []},
        }
        payload.update(_actor(user_id, guild))
        return Interaction.model_validate(payload)

    return _make


@pytest.fixture
def make_component() -> Callable[..., Interaction]:
    """Factory for message-component interactions (button clicks and selects)."""

    def _make(
        custom_id: str,
        values: list[str] | None = None,
        interaction_id: str = "2001",
        user_id: str = "43",
        token: str = "tok-comp",
        message_id: str | None = "3001",
        guild: bool = True,
    ) -> Interaction:
        data: dict[str, Any] = {"custom_id": custom_id, "component_type": 3 if values else 2}
        if values:
            data["values"] = values
        payload: dict[str, Any] = {
            "id": interaction_id,
            "type": 3,
            "token": token,
            "application_id": "999",
            "data": data,
        }
        if message_id is not None:
            payload["message"] = {"id": message_id, "content": ""}
        payload.update(_actor(user_id, guild))
        return Interaction.model_validate(payload)

    return _make
