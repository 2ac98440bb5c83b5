"""Split oversized replies into pages navigated with Previous/Next buttons."""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import discord

from askbot.models.interaction import PAGE_NEXT_PREFIX, PAGE_PREV_PREFIX, make_custom_id


log = logging.getLogger(__name__)


# Discord message character limit
DISCORD_MESSAGE_LIMIT = 2000


class RenderOverflow(Exception):
    """A rendered page is still longer than the transport allows."""


class Direction(Enum):
    PREVIOUS = "previous"
    NEXT = "next"


@dataclass
class PageSet:
    """Ordered chunks of one reply plus the page currently shown.

    Invariant: ``0 <= index < len(chunks)``.
    """

    chunks: list[str] = field(default_factory=lambda: [""])
    index: int = 0

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def current(self) -> str:
        return self.chunks[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == len(self.chunks) - 1


def _last_whitespace(text: str, lo: int, hi: int) -> int:
    """Index of the last whitespace character in text[lo:hi], or -1."""
    for i in range(hi - 1, lo - 1, -1):
        if text[i].isspace():
            return i
    return -1


def paginate(content: str, limit: int = DISCORD_MESSAGE_LIMIT, lookback: int | None = None) -> PageSet:
    """Split content into chunks of at most ``limit`` characters.

    Each cut goes right after the last whitespace found within ``lookback``
    characters before the limit, so words stay whole where possible; with no
    whitespace in that window the chunk is cut hard at the limit. Nothing is
    dropped or inserted: ``"".join(chunks) == content``.

    Args:
        content: Text to split.
        limit: Maximum chunk length.
        lookback: How far back from the limit to look for whitespace.
            Defaults to a quarter of the limit.

    Returns:
        A PageSet positioned on the first chunk.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    if lookback is None:
        lookback = max(1, limit // 4)

    chunks: list[str] = []
    start = 0
    n = len(content)
    while n - start > limit:
        end = start + limit
        # Never look back to start itself, otherwise a chunk could be empty
        window_start = max(start + 1, end - lookback)
        ws = _last_whitespace(content, window_start, end)
        cut = ws + 1 if ws != -1 else end
        chunks.append(content[start:cut])
        start = cut
    chunks.append(content[start:])
    return PageSet(chunks=chunks)


def navigate(pages: PageSet, direction: Direction) -> bool:
    """Move the cursor one page; at either end this is a no-op.

    Returns:
        True if the page changed.
    """
    if direction is Direction.PREVIOUS:
        if pages.is_first:
            return False
        pages.index -= 1
        return True
    if pages.is_last:
        return False
    pages.index += 1
    return True


def clip_to_limit(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> str:
    """Truncate text to at most ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]
    return text[: limit - 3].rstrip() + "..."


def check_fits(pages: PageSet, limit: int) -> None:
    if len(pages.current) > limit:
        raise RenderOverflow(f"page {pages.index + 1}/{len(pages)} is {len(pages.current)} chars (limit {limit})")


def render(pages: PageSet, key: str, limit: int = DISCORD_MESSAGE_LIMIT) -> tuple[str, list[dict[str, Any]]]:
    """Render the current page and its navigation buttons.

    Previous is disabled on the first page and Next on the last one. If the
    chunk somehow exceeds ``limit`` the overflow is logged and the text is
    clipped so the edit still goes through.
    """
    text = pages.current
    try:
        check_fits(pages, limit)
    except RenderOverflow as e:
        log.error("Page render overflow for %s: %s", key, e)
        text = clip_to_limit(text, limit)

    components = [
        {
            "type": discord.ComponentType.action_row.value,
            "components": [
                {
                    "type": discord.ComponentType.button.value,
                    "custom_id": make_custom_id(PAGE_PREV_PREFIX, key),
                    "label": "Previous",
                    "style": discord.ButtonStyle.secondary.value,
                    "disabled": pages.is_first,
                },
                {
                    "type": discord.ComponentType.button.value,
                    "custom_id": make_custom_id(PAGE_NEXT_PREFIX, key),
                    "label": "Next",
                    "style": discord.ButtonStyle.primary.value,
                    "disabled": pages.is_last,
                },
            ],
        }
    ]
    return text, components


class PageStore:
    """Page sets keyed by the id of the interaction that produced them.

    Bounded: once ``max_entries`` is reached the oldest page set is dropped.
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self._pages: OrderedDict[str, PageSet] = OrderedDict()
        self._max_entries = max_entries

    def put(self, key: str, pages: PageSet) -> None:
        self._pages[key] = pages
        self._pages.move_to_end(key)
        while len(self._pages) > self._max_entries:
            evicted, _ = self._pages.popitem(last=False)
            log.debug("Evicted page set %s", evicted)

    def get(self, key: str) -> PageSet | None:
        return self._pages.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._pages

    def __len__(self) -> int:
        return len(self._pages)
