"""LLM intent classifier: taxonomy prompt in, ClassifiedMessage out."""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from storefront_bot.orchestrator.normalization import normalize_product_name, normalize_size
from storefront_bot.orchestrator.sanitizer import sanitize_context, sanitize_input
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationTurn,
    OrchestratorConfig,
    ParameterSet,
)

if TYPE_CHECKING:
    from storefront_bot.clients.llm.base import BaseLLMClient, LLMMessage

logger = logging.getLogger(__name__)

CLASSIFICATION_PROMPT = """\
You classify customer-support messages for an online clothing store and extract parameters.
Customers write in Spanish or English.

Intents:
- "order_tracking": where is my order, shipping status. "¿Dónde está mi pedido?", "Track my order #1234"
- "returns_exchange": return or exchange an item. "Quiero devolver", "How do I exchange a size?"
- "change_delivery": change the delivery address of an order. "Quiero cambiar la dirección de envío"
- "delivery_issue": order marked delivered but not received, damaged or late. "No me ha llegado", "My package never arrived"
- "product_sizing": which size fits, size charts. "¿Qué talla me recomiendas si mido 1,80?"
- "product_information": details about a product (fabric, colours, care).
- "restock": when a product or size will be back in stock. "¿Cuándo vuelve la talla M?"
- "promo_code": discounts, promo codes, newsletter offers.
- "invoice_request": invoice or receipt for an order. "Necesito la factura"
- "update_order": modify an order after purchase (items, size, shipping address).
- "conversation_end": thanks, goodbye, nothing else needed. "Gracias!", "That's all, bye"
- "return_status": status of a return or refund already sent.
- "other-order": anything else about a specific order.
- "other-general": anything else.

Rules:
- If there is ANY ambiguity about whether the customer moved to a new topic, RESET: classify only the latest message and leave parameters from earlier topics empty.
- If the customer answers a question the assistant just asked (e.g. gives an order number or email), keep the intent of that earlier question.
- order_number: digits only, without "#". email: exactly as written.
- product_size: one of XS, S, M, L, XL, XXL when the customer names a size, "not_found" when they name a size that is none of these, "" otherwise.
- product_name: one of the active products below when the customer refers to it, "not_found" when they refer to a product that is not in the list, "" otherwise.
- update_type: "shipping_address" or "product" when clear, "" otherwise.
- new_delivery_info: the full new address when the customer gives one.
- delivery_address_confirmed: true only when the customer confirms a proposed address.
- language: "Spanish" if the latest customer message is in Spanish, otherwise "English".
- Use "" for unknown text values and false for unknown booleans.

Active products:
{active_products}

Respond with ONLY a JSON object, no markdown:
{{"intent": "<intent>", "parameters": {{{parameter_template}}}, "language": "<English|Spanish>"}}
"""


def _parameter_template() -> str:
    defaults = ParameterSet().to_dict()
    return ", ".join(f'"{k}": {json.dumps(v)}' for k, v in defaults.items())


def extract_json_object(raw: str) -> Optional[Dict[str, Any]]:
    """Parse *raw* as JSON, falling back to the first balanced ``{...}`` inside it."""
    text = raw.strip()
    if text.startswith("```"):
        text = "\n".join(
            line for line in text.splitlines()
            if not line.strip().startswith("```")
        ).strip()
    try:
        data = json.loads(text)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            return None
        try:
            data = json.loads(text[start:end + 1])
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass
        start = text.find("{", start + 1)
    return None


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at *start*, ignoring braces inside strings."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


class LLMClassifier:
    """Ask the LLM for intent + parameters. Never raises: any failure yields the default classification."""

    def __init__(
        self,
        llm: "BaseLLMClient",
        config: OrchestratorConfig,
        *,
        active_products: Optional[List[str]] = None,
    ) -> None:
        self._llm = llm
        self._config = config
        self.active_products: List[str] = list(active_products or [])

    def build_prompt(self) -> str:
        products = "\n".join(f"- {title}" for title in self.active_products) or "(none listed)"
        return CLASSIFICATION_PROMPT.format(
            active_products=products,
            parameter_template=_parameter_template(),
        )

    async def classify(
        self,
        message: Any,
        context: Optional[List[ConversationTurn]] = None,
    ) -> ClassifiedMessage:
        return await self.try_classify(message, context) or ClassifiedMessage.default()

    async def try_classify(
        self,
        message: Any,
        context: Optional[List[ConversationTurn]] = None,
    ) -> Optional[ClassifiedMessage]:
        """Like classify(), but None instead of the default when classification failed."""
        if not isinstance(message, str) or not message.strip():
            return None

        history = sanitize_context(context)
        if self._config.max_context_turns > 0:
            history = history[-self._config.max_context_turns:]
        else:
            history = []

        messages: List["LLMMessage"] = [{"role": "system", "content": self.build_prompt()}]
        messages.extend(history)  # type: ignore[arg-type]
        messages.append({"role": "user", "content": sanitize_input(message)})

        try:
            raw = await self._llm.chat(messages, temperature=self._config.classification_temperature)
        except Exception as exc:
            logger.error("LLMClassifier: classification failed: %s", exc)
            return None
        return self._parse(raw)

    def _parse(self, raw: str) -> Optional[ClassifiedMessage]:
        data = extract_json_object(raw or "")
        if data is None:
            logger.warning("LLMClassifier: could not parse JSON from: %s", (raw or "")[:300])
            return None
        if not data.get("intent") or not isinstance(data.get("parameters"), dict):
            logger.warning("LLMClassifier: response is missing intent or parameters")
            return None

        result = ClassifiedMessage.from_dict(data)
        params = result.parameters
        params.order_number = params.order_number.lstrip("#").strip()
        params.product_size = normalize_size(params.product_size)
        params.product_name = normalize_product_name(params.product_name, self.active_products)
        return result
