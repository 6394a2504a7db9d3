"""
Exponential backoff around any BaseLLMClient.

Only provider throttling (429), provider-side failures (5xx) and network
failures are retried; everything else propagates on the first attempt.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from storefront_bot.clients.llm.base import BaseLLMClient, LLMMessage
from storefront_bot.core.exceptions import LLMProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryingLLMClient(BaseLLMClient):
    """Wraps a client; waits ``base_delay * 2**attempt`` seconds between attempts.

    With the defaults (3 retries, 1 s) a failing call is attempted four times,
    after waits of 1, 2 and 4 seconds.
    """

    def __init__(
        self,
        inner: BaseLLMClient,
        *,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self._inner = inner
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    @property
    def provider(self) -> str:
        return self._inner.provider

    @property
    def inner(self) -> BaseLLMClient:
        return self._inner

    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        return await self._with_retry(lambda: self._inner.complete(prompt, temperature=temperature))

    async def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: Optional[float] = None,
    ) -> str:
        return await self._with_retry(lambda: self._inner.chat(messages, temperature=temperature))

    async def test_connection(self) -> bool:
        return await self._inner.test_connection()

    async def _with_retry(self, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await call()
            except LLMProviderError as exc:
                if not exc.retryable or attempt >= self._max_retries:
                    raise
                delay = self._base_delay * (2 ** attempt)
                logger.warning(
                    "LLM call failed (status=%s), retrying in %.1fs",
                    exc.status_code,
                    delay,
                    extra={"extra": {"provider": self.provider, "attempt": attempt + 1}},
                )
                await self._sleep(delay)
                attempt += 1
