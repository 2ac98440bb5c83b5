"""Duel state and outcome rules for rock/paper/scissors challenges."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence


# Canonical circular order. Each choice beats the one before it, so
# (index_b - index_a) mod N tells who wins without a lookup table.
CHOICES: tuple[str, ...] = ("rock", "paper", "scissors")

# Select menu descriptions shown next to each option
CHOICE_DESCRIPTIONS: dict[str, str] = {
    "rock": "sedimentary, igneous, or perhaps even metamorphic",
    "paper": "versatile and iconic",
    "scissors": "careful ! sharp ! edges !!",
}

# (winner, loser) -> verb used in the outcome line
VERBS: dict[tuple[str, str], str] = {
    ("rock", "scissors"): "crushes",
    ("paper", "rock"): "covers",
    ("scissors", "paper"): "cuts",
}


class Outcome(Enum):
    """Result of a duel from the point of view of the two choices."""

    A_WINS = "a_wins"
    B_WINS = "b_wins"
    TIE = "tie"


@dataclass(frozen=True)
class DuelSession:
    """One open challenge.

    Attributes:
        session_id: Id of the interaction that opened the challenge
        challenger_id: Discord user id of the challenger
        choice: The challenger's pick, hidden until someone answers
    """

    session_id: str
    challenger_id: str
    choice: str


def resolve(choice_a: str, choice_b: str, ordered: Sequence[str] = CHOICES) -> Outcome:
    """Decide a duel between two choices drawn from a circular list.

    With ``d = (index_b - index_a) mod N``, B wins when ``1 <= d <= N // 2``
    and A wins otherwise. For odd N that is the exact ``(N-1)/2`` half; for
    even N the choice opposite A counts as a win for B.

    Args:
        choice_a: First participant's choice.
        choice_b: Second participant's choice.
        ordered: Circular choice order; only the 3-choice table is verified.

    Returns:
        The outcome for A and B.

    Raises:
        ValueError: If either choice is not in ``ordered``.
    """
    n = len(ordered)
    try:
        index_a = ordered.index(choice_a)
        index_b = ordered.index(choice_b)
    except ValueError:
        raise ValueError(f"unknown choice: {choice_a!r} vs {choice_b!r}") from None

    d = (index_b - index_a) % n
    if d == 0:
        return Outcome.TIE
    if d <= n // 2:
        return Outcome.B_WINS
    return Outcome.A_WINS


def is_choice(value: str | None) -> bool:
    return value in CHOICES


def shuffled_options(rng: random.Random | None = None) -> list[dict[str, str]]:
    """Build string-select options in a random display order.

    Display order is cosmetic; ``resolve`` always uses ``CHOICES``.
    """
    names = list(CHOICES)
    (rng or random).shuffle(names)
    return [
        {
            "label": name.capitalize(),
            "value": name,
            "description": CHOICE_DESCRIPTIONS.get(name, ""),
        }
        for name in names
    ]


def format_result(session: DuelSession, responder_id: str, responder_choice: str) -> str:
    """Format the outcome line announced in the channel."""
    outcome = resolve(session.choice, responder_choice)
    if outcome is Outcome.TIE:
        return f"<@{session.challenger_id}> and <@{responder_id}> draw with **{session.choice}**"

    if outcome is Outcome.A_WINS:
        winner_id, winner_choice = session.challenger_id, session.choice
        loser_id, loser_choice = responder_id, responder_choice
    else:
        winner_id, winner_choice = responder_id, responder_choice
        loser_id, loser_choice = session.challenger_id, session.choice

    verb = VERBS.get((winner_choice, loser_choice), "beats")
    return f"<@{winner_id}>'s **{winner_choice}** {verb} <@{loser_id}>'s **{loser_choice}**"
