"""User-facing message text."""
from __future__ import annotations

import random

from askbot.services.pagination import clip_to_limit


EMOJIS = ("😭", "😄", "😌", "🤓", "😎", "😤", "🤖", "😶‍🌫️", "🌏", "📸", "💿", "👋", "🌊", "✨")

SLOGAN = "Develop Anything, Deploy Anywhere"

# Longest question echoed back in a reply
QUESTION_PREVIEW_LIMIT = 1500


def random_emoji() -> str:
    return random.choice(EMOJIS)


def quoted(question: str) -> str:
    return f"\n> {clip_to_limit(question, QUESTION_PREVIEW_LIMIT)}\n\n"


def ask_placeholder(question: str) -> str:
    return f"{quoted(question)}Let me find the answer for you. This might take a moment"


def ask_progress(question: str, tick: int) -> str:
    return ask_placeholder(question) + "." * tick


def ask_answer(question: str, user_id: str | None, answer: str) -> str:
    return f"{quoted(question)}Here's what I found, <@{user_id}>:\n\n{answer}"


def ask_apology(question: str, user_id: str | None) -> str:
    return (
        f"{quoted(question)}Sorry <@{user_id}>, I couldn't fetch an answer to your question. "
        "Please try again later."
    )


def slogan_reply() -> str:
    return f"{SLOGAN} {random_emoji()}"


def challenge_invite(user_id: str | None) -> str:
    return f"Rock papers scissors challenge from <@{user_id}>"


CHOICE_PROMPT = "What is your object of choice?"
UNKNOWN_CHOICE = "That's not something you can throw. Pick rock, paper, or scissors."
CHALLENGE_FAILED = "Couldn't open that challenge. Please try again."
CHALLENGE_GONE = "This challenge is no longer available."
PAGES_GONE = "These pages are no longer available. Ask the question again to see the full answer."


def nice_choice() -> str:
    return f"Nice choice {random_emoji()}"
