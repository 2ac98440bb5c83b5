"""Routes inbound interactions to the ask, test and duel flows."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable

import discord

from askbot import templates
from askbot.models.duel import format_result, is_choice, shuffled_options
from askbot.models.interaction import (
    ACCEPT_PREFIX,
    PAGE_NEXT_PREFIX,
    PAGE_PREV_PREFIX,
    SELECT_PREFIX,
    Interaction,
    InteractionKind,
    MalformedCustomId,
    make_custom_id,
    parse_custom_id,
)
from askbot.services.answer_client import AnswerClient, TransportError, UpstreamError
from askbot.services.discord_client import DiscordClient
from askbot.services.pagination import (
    DISCORD_MESSAGE_LIMIT,
    Direction,
    PageStore,
    clip_to_limit,
    navigate,
    paginate,
    render,
)
from askbot.services.relay import ContinuationRelay, message_body
from askbot.services.sessions import DuplicateSession, SessionRegistry, UnknownSession
from askbot.services.ticker import DEFAULT_MAX_TICKS, ProgressTicker

log = logging.getLogger(__name__)


Followup = Callable[[], Awaitable[None]]


class DispatchError(Exception):
    """An interaction this bot cannot handle; answered with HTTP 400."""

    error = "bad request"


class UnknownCommand(DispatchError):
    error = "unknown command"


class UnknownComponent(DispatchError):
    error = "unknown component"


class UnknownInteractionType(DispatchError):
    error = "unknown interaction type"


class MalformedInteraction(DispatchError):
    error = "malformed interaction"


@dataclass
class DispatchSettings:
    progress_interval_seconds: float = 0.5
    message_limit: int = DISCORD_MESSAGE_LIMIT
    max_ticks: int = DEFAULT_MAX_TICKS


@dataclass
class DispatchResult:
    """HTTP reply for one interaction plus work to run after it is sent.

    Attributes:
        body: JSON body returned to Discord
        status_code: HTTP status of the reply
        followup: Coroutine factory to run once the reply has gone out
    """

    body: dict[str, Any]
    status_code: int = 200
    followup: Followup | None = None


class InteractionDispatcher:
    """Classifies interactions and drives the flows behind them.

    Every piece of shared state (open duels, page sets) is passed in, so
    tests and the app each get their own instances.
    """

    def __init__(
        self,
        discord_client: DiscordClient,
        answers: AnswerClient,
        sessions: SessionRegistry | None = None,
        pages: PageStore | None = None,
        settings: DispatchSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.discord = discord_client
        self.answers = answers
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.pages = pages if pages is not None else PageStore()
        self.settings = settings or DispatchSettings()
        self._rng = rng
        self._commands: dict[str, Callable[[Interaction], DispatchResult]] = {
            "ask": self._ask,
            "test": self._test,
            "challenge": self._challenge,
        }
        self._components: dict[str, Callable[[Interaction, str], DispatchResult]] = {
            ACCEPT_PREFIX: self._accept,
            SELECT_PREFIX: self._select,
            PAGE_PREV_PREFIX: partial(self._page, direction=Direction.PREVIOUS),
            PAGE_NEXT_PREFIX: partial(self._page, direction=Direction.NEXT),
        }

    def dispatch(self, interaction: Interaction) -> DispatchResult:
        try:
            return self._route(interaction)
        except DispatchError as e:
            log.error("Rejected interaction %s (type=%s): %s %s", interaction.id, interaction.type, e.error, e)
            return DispatchResult({"error": e.error}, status_code=400)

    def _route(self, interaction: Interaction) -> DispatchResult:
        kind = interaction.kind
        if kind is InteractionKind.HANDSHAKE:
            return DispatchResult({"type": discord.InteractionResponseType.pong.value})

        if kind is InteractionKind.COMMAND:
            name = interaction.command_name or ""
            handler = self._commands.get(name)
            if handler is None:
                raise UnknownCommand(name)
            log.info("Command /%s from %s (interaction=%s)", name, interaction.actor_id, interaction.id)
            return handler(interaction)

        if kind is InteractionKind.COMPONENT:
            try:
                prefix, key = parse_custom_id(interaction.custom_id)
            except MalformedCustomId as e:
                raise UnknownComponent(str(e)) from e
            log.info("Component %s from %s (key=%s)", prefix, interaction.actor_id, key)
            return self._components[prefix](interaction, key)

        raise UnknownInteractionType(str(interaction.type))

    def _relay(self, interaction: Interaction) -> ContinuationRelay:
        return ContinuationRelay(self.discord, interaction.token)

    @staticmethod
    async def _best_effort(what: str, action: Callable[[], Awaitable[object]]) -> None:
        """Run a side action whose failure must not affect the reply."""
        try:
            await action()
        except Exception as e:
            log.warning("Best-effort %s failed: %s", what, e)

    # ---- ask ---------------------------------------------------------------

    def _ask(self, interaction: Interaction) -> DispatchResult:
        raw = interaction.option("question") or interaction.first_option_value()
        question = str(raw).strip() if raw is not None else ""
        if not question:
            question = "No question provided"

        relay = self._relay(interaction)
        placeholder = clip_to_limit(templates.ask_placeholder(question), self.settings.message_limit)
        body = relay.send_initial(placeholder, ephemeral=True)
        followup = partial(self.run_ask, relay, interaction.id, question, interaction.actor_id)
        return DispatchResult(body, followup=followup)

    async def run_ask(self, relay: ContinuationRelay, key: str, question: str, user_id: str | None) -> None:
        """Animate the placeholder, fetch the answer, then edit it in once.

        The ticker is stopped before the final edit is sent so a late
        progress frame can never overwrite the answer.
        """
        ticker = ProgressTicker.start(
            self.settings.progress_interval_seconds,
            partial(self._progress_frame, question),
            relay.patch,
            max_ticks=self.settings.max_ticks,
        )
        try:
            answer = await self.answers.fetch(question)
            content = templates.ask_answer(question, user_id, answer)
        except UpstreamError as e:
            log.warning("Answer fetch failed (interaction=%s): upstream status=%s", key, e.status_code)
            content = templates.ask_apology(question, user_id)
        except TransportError as e:
            log.warning("Answer fetch failed (interaction=%s): transport error: %s", key, e)
            content = templates.ask_apology(question, user_id)
        except Exception as e:
            log.error("Unexpected error fetching answer (interaction=%s): %s", key, e, exc_info=True)
            content = templates.ask_apology(question, user_id)
        finally:
            await ticker.stop()

        try:
            await self._deliver(relay, key, content)
        except Exception as e:
            log.error("Final answer edit failed (interaction=%s): %s", key, e, exc_info=True)

    def _progress_frame(self, question: str, tick: int) -> str:
        return clip_to_limit(templates.ask_progress(question, tick), self.settings.message_limit)

    async def _deliver(self, relay: ContinuationRelay, key: str, content: str) -> None:
        limit = self.settings.message_limit
        if len(content) <= limit:
            await relay.patch(content)
            return

        pages = paginate(content, limit)
        self.pages.put(key, pages)
        log.info("Answer for interaction %s split into %d pages (%d chars)", key, len(pages), len(content))
        text, components = render(pages, key, limit)
        await relay.patch(text, components)

    def _page(self, interaction: Interaction, key: str, direction: Direction) -> DispatchResult:
        relay = self._relay(interaction)
        pages = self.pages.get(key)
        if pages is None:
            log.info("Page navigation for unknown page set %s", key)
            return DispatchResult(relay.send_initial(templates.PAGES_GONE, ephemeral=True))

        body = relay.defer_update()
        if not navigate(pages, direction):
            # Already at the edge; the matching button is disabled anyway
            return DispatchResult(body)

        text, components = render(pages, key, self.settings.message_limit)
        followup = partial(self._best_effort, f"page {direction.value} edit for {key}", partial(relay.patch, text, components))
        return DispatchResult(body, followup=followup)

    # ---- test --------------------------------------------------------------

    def _test(self, interaction: Interaction) -> DispatchResult:
        return DispatchResult(self._relay(interaction).send_initial(templates.slogan_reply()))

    # ---- duel --------------------------------------------------------------

    def _require_actor(self, interaction: Interaction) -> str:
        actor_id = interaction.actor_id
        if not actor_id:
            raise MalformedInteraction(f"no user on interaction {interaction.id}")
        return actor_id

    def _challenge(self, interaction: Interaction) -> DispatchResult:
        user_id = self._require_actor(interaction)
        raw = interaction.option("object") or interaction.first_option_value()
        choice = str(raw).strip().lower() if raw is not None else None
        relay = self._relay(interaction)
        if not is_choice(choice):
            return DispatchResult(relay.send_initial(templates.UNKNOWN_CHOICE, ephemeral=True))

        try:
            self.sessions.create(interaction.id, user_id, choice)  # type: ignore[arg-type]
        except DuplicateSession:
            log.error("Duel session %s already exists; refusing to overwrite it", interaction.id)
            return DispatchResult(relay.send_initial(templates.CHALLENGE_FAILED, ephemeral=True))

        components = [
            {
                "type": discord.ComponentType.action_row.value,
                "components": [
                    {
                        "type": discord.ComponentType.button.value,
                        "custom_id": make_custom_id(ACCEPT_PREFIX, interaction.id),
                        "label": "Accept",
                        "style": discord.ButtonStyle.primary.value,
                    }
                ],
            }
        ]
        return DispatchResult(relay.send_initial(templates.challenge_invite(user_id), components))

    def _accept(self, interaction: Interaction, key: str) -> DispatchResult:
        relay = self._relay(interaction)
        components = [
            {
                "type": discord.ComponentType.action_row.value,
                "components": [
                    {
                        "type": discord.ComponentType.string_select.value,
                        "custom_id": make_custom_id(SELECT_PREFIX, key),
                        "options": shuffled_options(self._rng),
                    }
                ],
            }
        ]
        body = relay.send_initial(templates.CHOICE_PROMPT, components, ephemeral=True)

        followup = None
        message_id = interaction.message_id
        if message_id:
            followup = partial(
                self._best_effort,
                f"delete of invite message {message_id}",
                partial(self.discord.delete_message, interaction.token, message_id),
            )
        return DispatchResult(body, followup=followup)

    def _select(self, interaction: Interaction, key: str) -> DispatchResult:
        user_id = self._require_actor(interaction)
        choice = interaction.selected_value
        relay = self._relay(interaction)
        # Validate before consuming so a bad value does not burn the duel
        if not is_choice(choice):
            return DispatchResult(relay.send_initial(templates.UNKNOWN_CHOICE, ephemeral=True))

        try:
            session = self.sessions.consume(key)
        except UnknownSession:
            log.info("Select for unknown or finished duel %s by %s", key, user_id)
            return DispatchResult(relay.send_initial(templates.CHALLENGE_GONE, ephemeral=True))

        result = format_result(session, user_id, choice)  # type: ignore[arg-type]
        log.info("Duel %s resolved: %s (%s) vs %s (%s)", key, session.challenger_id, session.choice, user_id, choice)
        body = relay.send_initial(result)

        followup = None
        message_id = interaction.message_id
        if message_id:
            followup = partial(
                self._best_effort,
                f"update of selection message {message_id}",
                partial(self.discord.edit_message, interaction.token, message_id, message_body(templates.nice_choice())),
            )
        return DispatchResult(body, followup=followup)
