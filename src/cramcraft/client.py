"""HTTP client for the remote generation service with classified retries."""
import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum

import httpx

from cramcraft.config import Settings
from cramcraft.errors import (
    CramCraftError, ConfigurationError, EmptyResponseError, HTTPError,
    NetworkError, ParseError, RequestTimeoutError,
)

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    BACKOFF = "backoff"
    SUCCESS = "success"
    FAILED = "failed"


TERMINAL_STATES = (AttemptState.SUCCESS, AttemptState.FAILED)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_jitter: float = 1.0

    def delay_for(self, attempt: int, rng=random.random) -> float:
        """Exponential backoff for the given zero-based attempt, plus jitter."""
        return self.base_delay * (2 ** attempt) + rng() * self.max_jitter


def next_state(state: AttemptState, error: CramCraftError | None,
               attempt: int, max_retries: int) -> AttemptState:
    """Transition function for one logical request.

    ``error`` is the classified failure of the attempt that just finished
    (None on success); ``attempt`` is that attempt's zero-based index.
    """
    if state is AttemptState.IDLE:
        return AttemptState.SENDING
    if state is AttemptState.SENDING:
        if error is None:
            return AttemptState.SUCCESS
        if error.retryable and attempt < max_retries:
            return AttemptState.BACKOFF
        return AttemptState.FAILED
    if state is AttemptState.BACKOFF:
        return AttemptState.SENDING
    return state


def extract_text(data: dict) -> str:
    """Return the first text block of a messages-style response."""
    content = data.get("content") if isinstance(data, dict) else None
    if not content:
        raise EmptyResponseError("Response contained no content")
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text")
            if not text:
                raise EmptyResponseError("Response text block was empty")
            return text
    raise EmptyResponseError("Response contained no text block")


class RequestClient:
    """Sends single prompts to the generation service.

    Each call to :meth:`send` is independent; the instance only holds the
    credential, endpoint and retry policy. ``transport`` lets tests swap in
    ``httpx.MockTransport`` and ``sleep`` lets them record backoff delays.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None,
                 sleep=asyncio.sleep, rng=random.random):
        if not settings.api_key:
            raise ConfigurationError("No API key configured. Set CRAMCRAFT_API_KEY.")
        self.settings = settings
        self.policy = RetryPolicy(
            max_retries=settings.max_retries,
            base_delay=settings.base_delay,
            max_jitter=settings.max_jitter,
        )
        self._transport = transport
        self._sleep = sleep
        self._rng = rng

    def _headers(self) -> dict:
        return {
            "content-type": "application/json",
            "x-api-key": self.settings.api_key,
            "anthropic-version": self.settings.api_version,
        }

    async def send(self, prompt: str, max_tokens: int = 4096, temperature: float = 1.0,
                   max_retries: int | None = None) -> str:
        retries = self.policy.max_retries if max_retries is None else max_retries
        payload = {
            "model": self.settings.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }

        state = next_state(AttemptState.IDLE, None, 0, retries)
        attempt = 0
        text = None
        last_error = None
        while state not in TERMINAL_STATES:
            if state is AttemptState.SENDING:
                last_error = None
                try:
                    text = await self._attempt(payload)
                except CramCraftError as exc:
                    last_error = exc
                    logger.warning("Attempt %d/%d failed: %s (retryable=%s)",
                                   attempt + 1, retries + 1, exc.message, exc.retryable)
                state = next_state(state, last_error, attempt, retries)
            elif state is AttemptState.BACKOFF:
                delay = self.policy.delay_for(attempt, self._rng)
                logger.info("Backing off %.2fs before retry %d", delay, attempt + 1)
                await self._sleep(delay)
                attempt += 1
                state = next_state(state, None, attempt, retries)

        if state is AttemptState.FAILED:
            raise last_error
        return text

    async def _attempt(self, payload: dict) -> str:
        timeout = self.settings.request_timeout
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                response = await asyncio.wait_for(
                    client.post(self.settings.api_url, headers=self._headers(), json=payload),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(f"Request timed out after {timeout:.0f}s") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Network error: {exc}") from exc

        if not response.is_success:
            raise HTTPError(response.status_code, _error_detail(response))
        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError("Response body was not valid JSON") from exc
        return extract_text(data)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if message:
            return f"HTTP {response.status_code}: {message}"
    return f"HTTP {response.status_code}: {response.reason_phrase}"
