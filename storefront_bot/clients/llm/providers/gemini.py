"""Google Gemini LLM provider: BaseLLMClient implementation + registry builder."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from storefront_bot.clients.llm.base import BaseLLMClient, LLMMessage
from storefront_bot.core.exceptions import LLMProviderError

logger = logging.getLogger(__name__)


def to_gemini_contents(messages: List[LLMMessage]) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """Split out system turns as the system instruction; assistant turns are sent as ``model``."""
    instructions: List[str] = []
    contents: List[Dict[str, Any]] = []
    for message in messages:
        text = (message.get("content") or "").strip()
        if not text:
            continue
        role = message.get("role", "user")
        if role == "system":
            instructions.append(text)
            continue
        contents.append({"role": "model" if role == "assistant" else "user", "parts": [{"text": text}]})
    return ("\n\n".join(instructions) or None), contents


class GeminiLLMClient(BaseLLMClient):
    """Google Gemini client (gemini-2.0-flash, gemini-1.5-pro, etc.)."""

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        *,
        api_key: Optional[str] = None,
        temperature: float = 0.0,
    ) -> None:
        self._model = model
        self._temperature = temperature
        resolved_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        self._client = genai.Client(api_key=resolved_key)

    @property
    def provider(self) -> str:
        return "gemini"

    async def complete(self, prompt: str, *, temperature: Optional[float] = None) -> str:
        return await self.chat([{"role": "user", "content": prompt}], temperature=temperature)

    async def chat(
        self,
        messages: List[LLMMessage],
        *,
        temperature: Optional[float] = None,
    ) -> str:
        system_instruction, contents = to_gemini_contents(messages)
        config = genai_types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self._temperature if temperature is None else temperature,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise LLMProviderError(
                f"Gemini returned {exc.code}", status_code=exc.code, cause=exc
            ) from exc
        except httpx.TransportError as exc:
            raise LLMProviderError("Gemini connection failed", cause=exc) from exc
        return response.text or ""

    async def test_connection(self) -> bool:
        try:
            await self.complete("Say OK")
            return True
        except LLMProviderError as exc:
            logger.warning("Gemini connection test failed: %s", exc)
            return False


def gemini_builder(config: Dict[str, Any]) -> GeminiLLMClient:
    return GeminiLLMClient(
        model=config.get("model", "gemini-2.0-flash"),
        api_key=config.get("api_key"),
        temperature=float(config.get("temperature", 0.0)),
    )
