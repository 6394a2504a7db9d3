"""Unit tests for RetryingLLMClient backoff."""
from __future__ import annotations

import asyncio
import unittest
from typing import List, Optional

from storefront_bot.clients.llm.base import BaseLLMClient
from storefront_bot.clients.llm.retry import RetryingLLMClient
from storefront_bot.core.exceptions import LLMProviderError


def _run(coro):
    return asyncio.run(coro)


class FlakyLLM(BaseLLMClient):
    """Raises the queued errors in order, then answers "ok"."""

    def __init__(self, errors: List[Exception]) -> None:
        self._errors = list(errors)
        self.attempts = 0

    @property
    def provider(self) -> str:
        return "flaky"

    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        self.attempts += 1
        if self._errors:
            raise self._errors.pop(0)
        return "ok"

    async def test_connection(self) -> bool:
        return True


class TestRetryingLLMClient(unittest.TestCase):
    def setUp(self) -> None:
        self.sleeps: List[float] = []

    async def _sleep(self, delay: float) -> None:
        self.sleeps.append(delay)

    def _client(self, inner: BaseLLMClient) -> RetryingLLMClient:
        return RetryingLLMClient(inner, max_retries=3, base_delay=1.0, sleep=self._sleep)

    def test_retries_rate_limit_with_exponential_backoff(self) -> None:
        inner = FlakyLLM([LLMProviderError("429", status_code=429) for _ in range(3)])
        result = _run(self._client(inner).complete("hi"))

        self.assertEqual(result, "ok")
        self.assertEqual(inner.attempts, 4)
        self.assertEqual(self.sleeps, [1.0, 2.0, 4.0])

    def test_gives_up_after_max_retries(self) -> None:
        inner = FlakyLLM([LLMProviderError("503", status_code=503) for _ in range(5)])
        with self.assertRaises(LLMProviderError):
            _run(self._client(inner).complete("hi"))
        self.assertEqual(inner.attempts, 4)
        self.assertEqual(self.sleeps, [1.0, 2.0, 4.0])

    def test_client_errors_are_not_retried(self) -> None:
        inner = FlakyLLM([LLMProviderError("400", status_code=400)])
        with self.assertRaises(LLMProviderError):
            _run(self._client(inner).complete("hi"))
        self.assertEqual(inner.attempts, 1)
        self.assertEqual(self.sleeps, [])

    def test_network_errors_are_retried(self) -> None:
        inner = FlakyLLM([LLMProviderError("reset")])
        result = _run(self._client(inner).chat([{"role": "user", "content": "hi"}]))
        self.assertEqual(result, "ok")
        self.assertEqual(self.sleeps, [1.0])

    def test_delegates_provider(self) -> None:
        client = self._client(FlakyLLM([]))
        self.assertEqual(client.provider, "flaky")
        self.assertTrue(_run(client.test_connection()))
