"""OpenAI LLM provider: BaseLLMClient implementation + registry builder."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from storefront_bot.clients.llm.base import BaseLLMClient, LLMMessage
from storefront_bot.core.exceptions import LLMProviderError

logger = logging.getLogger(__name__)


class OpenAILLMClient(BaseLLMClient):
    """OpenAI-compatible chat client (gpt-4o-mini by default).

    SDK-level retries are disabled; RetryingLLMClient owns the backoff policy.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        timeout: float = 60.0,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = AsyncOpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def provider(self) -> str:
        return "openai"

    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        return await self.chat([{"role": "user", "content": prompt}], temperature=temperature)

    async def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: Optional[float] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature if temperature is None else temperature,
        }
        if self._max_tokens is not None:
            kwargs["max_tokens"] = self._max_tokens
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as exc:
            raise LLMProviderError(
                f"OpenAI returned {exc.status_code}", status_code=exc.status_code, cause=exc
            ) from exc
        except openai.APIConnectionError as exc:
            raise LLMProviderError("OpenAI connection failed", cause=exc) from exc
        return response.choices[0].message.content or ""

    async def test_connection(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except openai.OpenAIError as exc:
            logger.warning("OpenAI connection test failed: %s", exc)
            return False


def openai_builder(config: Dict[str, Any]) -> OpenAILLMClient:
    return OpenAILLMClient(
        model=config.get("model", "gpt-4o-mini"),
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),
        temperature=float(config.get("temperature", 0.0)),
        max_tokens=config.get("max_tokens"),
        timeout=float(config.get("timeout", 60.0)),
    )
