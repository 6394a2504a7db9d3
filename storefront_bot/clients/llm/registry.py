"""
Provider name -> client builder. ``default_registry`` knows openai and gemini.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from storefront_bot.clients.llm.base import BaseLLMClient

Builder = Callable[[Dict[str, Any]], BaseLLMClient]


class LLMRegistry:
    def __init__(self) -> None:
        self._builders: Dict[str, Builder] = {}

    @property
    def providers(self) -> List[str]:
        return sorted(self._builders)

    def register(self, provider: str, builder: Builder) -> None:
        self._builders[provider.lower()] = builder

    def build(self, provider: str, config: Dict[str, Any]) -> BaseLLMClient:
        """Raises KeyError for a provider nobody registered."""
        try:
            builder = self._builders[provider.lower()]
        except KeyError:
            raise KeyError(f"Unknown LLM provider {provider!r}; known: {self.providers}") from None
        return builder(config)


default_registry = LLMRegistry()

from storefront_bot.clients.llm.providers.gemini import gemini_builder  # noqa: E402
from storefront_bot.clients.llm.providers.openai import openai_builder  # noqa: E402

default_registry.register("openai", openai_builder)
default_registry.register("gemini", gemini_builder)
