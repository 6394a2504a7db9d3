"""No-op LLM client used when no provider key is configured."""
from __future__ import annotations

from typing import Optional

from storefront_bot.clients.llm.base import BaseLLMClient


_NOOP_MESSAGE = (
    "The language model is not configured yet. Set OPENAI_API_KEY or "
    "GEMINI_API_KEY and restart the service."
)


class NoOpLLMClient(BaseLLMClient):
    """Placeholder client; its replies never parse as a classification."""

    @property
    def provider(self) -> str:
        return "noop"

    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        return _NOOP_MESSAGE

    async def test_connection(self) -> bool:
        return False
