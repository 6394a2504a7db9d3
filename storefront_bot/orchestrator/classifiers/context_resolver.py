"""
Context resolver: reconcile a fresh classification with the conversation so far.

Order of evaluation matters and is fixed:

1. follow-up      – the customer is answering the assistant's last question
                    (order number / email) → inherit the earlier intent.
2. new request    – fresh-start phrase after a concluded exchange → reset
                    parameters and re-derive the intent from keywords.
3. rescue         – still ``other-general`` → inherit the earlier intent.

Then, whatever the branch: tracking-number extraction (delivery_issue),
returns-portal detection (returns_exchange) and order-number / email
backfill from the customer's own turns.
"""
from __future__ import annotations

import json
import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from storefront_bot.orchestrator.classifiers.new_request_rules import (
    has_fresh_start_phrase,
    matching_conclusion,
    topic_intent,
)
from storefront_bot.orchestrator.types import (
    AGENT_ROLES,
    ClassifiedMessage,
    ConversationState,
    ConversationTurn,
    Intent,
    ParameterSet,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
ORDER_NUMBER_RE = re.compile(r"#(\d{4,})")
_DIGIT_RUN_RE = re.compile(r"\d{4,}")
_TRACKING_LINK_RE = re.compile(r"\[here\]\((https://.*?)\)")

_ASKS_ORDER_NUMBER = ("número de pedido", "order number", "#")
_ASKS_EMAIL = ("email", "correo")


def last_agent_turn(context: List[ConversationTurn]) -> Optional[ConversationTurn]:
    for turn in reversed(context):
        if turn.get("role") in AGENT_ROLES:
            return turn
    return None


class ContextResolver:
    """Stateless; one instance serves every request."""

    def __init__(self, *, returns_portal_url: str = "") -> None:
        self._returns_portal_url = returns_portal_url

    def resolve(
        self,
        classification: ClassifiedMessage,
        context: Optional[List[ConversationTurn]],
        *,
        state: Optional[ConversationState] = None,
    ) -> ClassifiedMessage:
        """Mutate and return *classification*. No-op without context."""
        if not context:
            return classification

        probe = self._probe_text(classification.parameters)
        agent_turn = last_agent_turn(context)
        agent_text = (agent_turn or {}).get("content") or ""

        if self.is_follow_up(probe, agent_text):
            logger.debug("ContextResolver: follow-up answer, inheriting previous intent")
            self.inherit_previous_intent(classification, context, state)
        elif self.is_new_request(probe, agent_text):
            logger.debug("ContextResolver: new request, resetting parameters")
            self.classify_new_request(classification, probe)
        elif classification.intent is Intent.OTHER_GENERAL:
            self.inherit_previous_intent(classification, context, state)

        if classification.intent is Intent.DELIVERY_ISSUE:
            self.extract_tracking_number(classification, context)
        if classification.intent is Intent.RETURNS_EXCHANGE:
            classification.parameters.returns_website_sent = self.returns_portal_sent(context)

        self.backfill_order_info(classification, context)
        return classification

    # ── Predicates ──────────────────────────────────────────────────────────

    @staticmethod
    def _probe_text(parameters: ParameterSet) -> str:
        """The freshly extracted order number, else the email."""
        return parameters.order_number or parameters.email

    @staticmethod
    def is_follow_up(probe: str, agent_text: str) -> bool:
        if not agent_text:
            return False
        asked = agent_text.lower()
        asked_for_order = any(marker in asked for marker in _ASKS_ORDER_NUMBER)
        asked_for_email = any(marker in asked for marker in _ASKS_EMAIL)
        gave_order = bool(_DIGIT_RUN_RE.search(probe))
        gave_email = bool(EMAIL_RE.search(probe))
        return (asked_for_order and gave_order) or (asked_for_email and gave_email)

    @staticmethod
    def is_new_request(probe: str, agent_text: str) -> bool:
        if not agent_text or not has_fresh_start_phrase(probe):
            return False
        return matching_conclusion(agent_text) is not None

    # ── Branch actions ──────────────────────────────────────────────────────

    @staticmethod
    def classify_new_request(classification: ClassifiedMessage, probe: str) -> None:
        classification.parameters = ParameterSet()
        classification.intent = topic_intent(probe)

    def inherit_previous_intent(
        self,
        classification: ClassifiedMessage,
        context: List[ConversationTurn],
        state: Optional[ConversationState] = None,
    ) -> None:
        previous = state.latest_specific() if state is not None else None
        if previous is None:
            previous = self._previous_from_transcript(context)
        if previous is None:
            return
        classification.intent = previous.intent
        classification.parameters = classification.parameters.merged_over(previous.parameters)

    @staticmethod
    def _previous_from_transcript(context: List[ConversationTurn]) -> Optional[ClassifiedMessage]:
        """Nearest assistant turn that is itself a serialized classification."""
        for turn in reversed(context):
            content = turn.get("content") or ""
            if turn.get("role") != "assistant" or "intent" not in content:
                continue
            try:
                data = json.loads(content)
            except json.JSONDecodeError:
                continue
            if not isinstance(data, dict) or not data.get("intent"):
                continue
            previous = ClassifiedMessage.from_dict(data)
            if previous.intent is not Intent.OTHER_GENERAL:
                return previous
        return None

    @staticmethod
    def extract_tracking_number(classification: ClassifiedMessage, context: List[ConversationTurn]) -> None:
        for turn in context:
            match = _TRACKING_LINK_RE.search(turn.get("content") or "")
            if not match:
                continue
            segments = [s for s in urlparse(match.group(1)).path.split("/") if s]
            numeric = [s for s in segments if s.isascii() and s.isdigit()]
            if numeric:
                classification.parameters.tracking_number = numeric[-1]
                return

    def returns_portal_sent(self, context: List[ConversationTurn]) -> bool:
        if not self._returns_portal_url:
            return False
        return any(self._returns_portal_url in (turn.get("content") or "") for turn in context)

    @staticmethod
    def backfill_order_info(classification: ClassifiedMessage, context: List[ConversationTurn]) -> None:
        params = classification.parameters
        if params.order_number and params.email:
            return
        for turn in context:
            if turn.get("role") != "user":
                continue
            content = turn.get("content") or ""
            if not params.order_number:
                match = ORDER_NUMBER_RE.search(content)
                if match:
                    params.order_number = match.group(1)
            if not params.email:
                match = EMAIL_RE.search(content)
                if match:
                    params.email = match.group(0)
            if params.order_number and params.email:
                break
