"""Handlers that answer from store policy: returns and promo codes."""
from __future__ import annotations

from typing import List, Optional

from storefront_bot.orchestrator.handlers.base import BaseHandler
from storefront_bot.orchestrator.replies import reply
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationTurn,
    OrchestratorResult,
)


class ReturnsExchangeHandler(BaseHandler):
    def __init__(self, returns_portal_url: str) -> None:
        self._url = returns_portal_url

    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        key = "returns_reminder" if classification.parameters.returns_website_sent else "returns_instructions"
        return self._result(classification, message, reply(key, classification.language, url=self._url))


class PromoCodeHandler(BaseHandler):
    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        email = classification.parameters.email
        if not email:
            return self._result(classification, message, reply("promo_ask_email", classification.language))
        return self._result(
            classification, message,
            reply("promo_subscribed", classification.language, email=email),
            subscribed=email,
        )
