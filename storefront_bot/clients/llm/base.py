"""
Provider-neutral LLM client interface.

The classifier and the answer generator only ever call ``chat`` with a system
prompt plus user/assistant turns. Providers without a native chat API get the
``fold_messages`` fallback.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Literal, Optional, TypedDict


class LLMMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


def fold_messages(messages: Iterable[LLMMessage]) -> str:
    """Flatten a conversation into one prompt, system instructions first; blank turns dropped."""
    system: List[str] = []
    turns: List[str] = []
    for message in messages:
        content = (message.get("content") or "").strip()
        if not content:
            continue
        role = message.get("role", "user")
        if role == "system":
            system.append(f"[System instructions]\n{content}\n")
        else:
            turns.append(f"{role}: {content}")
    return "\n".join(system + turns)


class BaseLLMClient(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        ...

    async def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: Optional[float] = None,
    ) -> str:
        """Raises ``LLMProviderError`` when the provider call fails."""
        return await self.complete(fold_messages(messages), temperature=temperature)

    @abstractmethod
    async def test_connection(self) -> bool:
        ...
