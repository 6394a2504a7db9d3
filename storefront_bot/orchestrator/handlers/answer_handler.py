"""AnswerHandler: Answer Generator with no commerce data (default route)."""
from __future__ import annotations

from typing import List, Optional

from storefront_bot.orchestrator.answer_generator import AnswerGenerator
from storefront_bot.orchestrator.handlers.base import BaseHandler
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationTurn,
    Intent,
    OrchestratorResult,
)


class AnswerHandler(BaseHandler):
    def __init__(self, generator: AnswerGenerator) -> None:
        self._generator = generator

    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        answer = await self._generator.generate(
            classification.intent,
            classification.parameters,
            None,
            message,
            conversation_history,
            classification.language,
        )
        return self._result(
            classification, message, answer,
            used_llm=classification.intent is not Intent.CONVERSATION_END,
        )
