"""
LLM clients: base, config, registry, retry wrapper.

Providers register on import: default_registry.build("openai", LLMConfig(...).to_dict()).
"""
from storefront_bot.clients.llm.base import BaseLLMClient, LLMMessage
from storefront_bot.clients.llm.config import LLMConfig
from storefront_bot.clients.llm.registry import LLMRegistry, default_registry
from storefront_bot.clients.llm.retry import RetryingLLMClient

__all__ = [
    "BaseLLMClient",
    "LLMMessage",
    "LLMConfig",
    "LLMRegistry",
    "default_registry",
    "RetryingLLMClient",
]
