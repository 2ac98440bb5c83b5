from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import httpx


log = logging.getLogger(__name__)


DEFAULT_ANSWER = "No answer provided."


@dataclass
class AnswerConfig:
    url: str
    token: str
    timeout_seconds: float = 60.0


class AnswerError(Exception):
    pass


class UpstreamError(AnswerError):
    """The answer service replied with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"answer service error, status={status_code}")
        self.status_code = status_code


class TransportError(AnswerError):
    """The answer service could not be reached."""


class AnswerClient:
    """Client for the external question-answering service.

    One attempt per question: a retry would keep the user staring at the
    progress dots for several more timeouts.
    """

    def __init__(self, cfg: AnswerConfig) -> None:
        self.cfg = cfg
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {cfg.token}",
                "Content-Type": "application/json",
            },
            timeout=cfg.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, query: str) -> str:
        """Ask the service one question and return its plain-text answer.

        Raises:
            UpstreamError: On a non-2xx status.
            TransportError: On connection failures and timeouts.
        """
        try:
            resp = await self._client.post(self.cfg.url, content=json.dumps({"query": query}))
        except httpx.TransportError as e:
            log.warning("Answer service unreachable (%s): %s", type(e).__name__, e)
            raise TransportError(str(e) or type(e).__name__) from e

        body = resp.text
        log.debug("Answer service raw response status=%s body=%s", resp.status_code, body[:500])

        if resp.status_code < 200 or resp.status_code >= 300:
            log.warning("Answer service returned status=%s", resp.status_code)
            raise UpstreamError(resp.status_code)

        return body or DEFAULT_ANSWER
