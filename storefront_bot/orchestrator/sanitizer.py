"""Neutralise prompt-injection markers before text reaches the model."""
from __future__ import annotations

import re
from typing import Any, Iterable, List

from storefront_bot.orchestrator.types import ConversationTurn

_SYSTEM_MARKER = re.compile(r"system:", re.IGNORECASE)


def sanitize_input(text: Any) -> str:
    """Replace code fences and ``system:`` markers, then trim. Idempotent; never raises."""
    if not isinstance(text, str):
        return ""
    text = text.replace("```", "'''")
    text = _SYSTEM_MARKER.sub("sys:", text)
    return text.strip()


def sanitize_context(context: Iterable[ConversationTurn] | None) -> List[ConversationTurn]:
    return [
        {"role": sanitize_input(turn.get("role")), "content": sanitize_input(turn.get("content"))}
        for turn in (context or [])
    ]
