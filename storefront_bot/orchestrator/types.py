"""Core data structures for the support orchestrator."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional

ConversationTurn = Dict[str, str]
"""A single turn: {"role": "system" | "user" | "assistant", "content": "..."}."""

AGENT_ROLES = ("system", "assistant")


class Intent(str, Enum):
    """The closed set of support intents."""
    ORDER_TRACKING = "order_tracking"
    RETURNS_EXCHANGE = "returns_exchange"
    CHANGE_DELIVERY = "change_delivery"
    DELIVERY_ISSUE = "delivery_issue"
    PRODUCT_SIZING = "product_sizing"
    PRODUCT_INFORMATION = "product_information"
    RESTOCK = "restock"
    PROMO_CODE = "promo_code"
    INVOICE_REQUEST = "invoice_request"
    UPDATE_ORDER = "update_order"
    CONVERSATION_END = "conversation_end"
    RETURN_STATUS = "return_status"
    OTHER_ORDER = "other-order"
    OTHER_GENERAL = "other-general"

    @classmethod
    def parse(cls, value: Any) -> "Intent":
        """Unknown or missing values map to OTHER_GENERAL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return cls.OTHER_GENERAL


class Language(str, Enum):
    ENGLISH = "English"
    SPANISH = "Spanish"

    @classmethod
    def parse(cls, value: Any) -> "Language":
        """Anything that is not recognisably Spanish is English."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text.startswith(("span", "esp")) or text == "es":
            return cls.SPANISH
        return cls.ENGLISH


_BOOL_SLOTS = ("delivery_address_confirmed", "returns_website_sent")


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _coerce_str(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


@dataclass
class ParameterSet:
    """Flat slot set extracted from a message. Empty string / False means "not provided"."""

    order_number: str = ""
    email: str = ""
    product_handle: str = ""
    product_name: str = ""
    product_size: str = ""
    size_query: str = ""
    new_delivery_info: str = ""
    delivery_status: str = ""
    tracking_number: str = ""
    delivery_address_confirmed: bool = False
    return_type: str = ""
    returns_website_sent: bool = False
    update_type: str = ""
    height: str = ""
    fit: str = ""

    @classmethod
    def slot_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ParameterSet":
        """Coerce loosely typed model output; unknown keys are ignored."""
        data = data or {}
        values: Dict[str, Any] = {}
        for name in cls.slot_names():
            if name not in data:
                continue
            raw = data[name]
            values[name] = _coerce_bool(raw) if name in _BOOL_SLOTS else _coerce_str(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.slot_names()}

    def merged_over(self, previous: "ParameterSet") -> "ParameterSet":
        """Previous values fill the text slots this set left empty. Flags always take this set's value."""
        merged = {}
        for name in self.slot_names():
            mine = getattr(self, name)
            if name in _BOOL_SLOTS or mine:
                merged[name] = mine
            else:
                merged[name] = getattr(previous, name)
        return ParameterSet(**merged)

    def has_order_identity(self) -> bool:
        return bool(self.order_number and self.email)


@dataclass
class ClassifiedMessage:
    """Intent, parameters and reply language for one inbound message."""

    intent: Intent = Intent.OTHER_GENERAL
    parameters: ParameterSet = field(default_factory=ParameterSet)
    language: Language = Language.ENGLISH

    @classmethod
    def default(cls) -> "ClassifiedMessage":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifiedMessage":
        params = data.get("parameters")
        return cls(
            intent=Intent.parse(data.get("intent")),
            parameters=ParameterSet.from_dict(params if isinstance(params, dict) else {}),
            language=Language.parse(data.get("language")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent.value,
            "parameters": self.parameters.to_dict(),
            "language": self.language.value,
        }

    def copy(self) -> "ClassifiedMessage":
        return copy.deepcopy(self)


@dataclass
class ConversationState:
    """Resolved classifications of earlier turns, oldest first.

    Clients echo this back on the next turn so intent inheritance reads typed
    data instead of re-parsing assistant text.
    """

    MAX_HISTORY = 20

    classifications: List[ClassifiedMessage] = field(default_factory=list)

    def latest_specific(self) -> Optional[ClassifiedMessage]:
        """Most recent classification whose intent is not other-general."""
        for item in reversed(self.classifications):
            if item.intent is not Intent.OTHER_GENERAL:
                return item
        return None

    def record(self, classification: ClassifiedMessage) -> "ConversationState":
        history = self.classifications + [classification.copy()]
        return ConversationState(classifications=history[-self.MAX_HISTORY:])

    def to_dict(self) -> Dict[str, Any]:
        return {"classifications": [c.to_dict() for c in self.classifications]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConversationState":
        """Raises ValueError when the payload does not have the expected shape."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("state must be an object")
        items = data.get("classifications", [])
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ValueError("state.classifications must be a list of objects")
        return cls(classifications=[ClassifiedMessage.from_dict(i) for i in items][-cls.MAX_HISTORY:])


@dataclass
class AddressValidationResult:
    """Geocoder outcome for a free-text address."""

    formatted_address: str = ""
    multiple_candidates: bool = False
    address_candidates: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return bool(self.formatted_address)

    @property
    def validation_status(self) -> str:
        if self.multiple_candidates:
            return "MULTIPLE"
        return "VALID" if self.is_valid else "INVALID"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formattedAddress": self.formatted_address,
            "multipleCandidates": self.multiple_candidates,
            "addressCandidates": list(self.address_candidates),
            "validationStatus": self.validation_status,
        }


@dataclass
class OrchestratorConfig:
    """Deadlines, sampling temperatures and store-specific strings."""

    classification_timeout_seconds: float = 30.0
    intent_timeout_seconds: float = 30.0
    answer_timeout_seconds: float = 30.0
    classification_temperature: float = 0.0
    answer_temperature: float = 0.85
    address_confirmation_temperature: float = 0.8
    max_context_turns: int = 20
    """Most recent turns forwarded to the model. 0 = no history."""

    returns_portal_url: str = ""
    bot_name: str = "Santi"
    store_name: str = "our store"

    @classmethod
    def from_settings(cls, settings: Any) -> "OrchestratorConfig":
        return cls(
            classification_timeout_seconds=settings.classification_timeout,
            intent_timeout_seconds=settings.intent_timeout,
            answer_timeout_seconds=settings.answer_timeout,
            returns_portal_url=settings.returns_portal_url,
            bot_name=settings.bot_name,
            store_name=settings.store_name,
        )


@dataclass
class OrchestratorMetrics:
    """Timing for a single orchestrator call."""

    classification_ms: float = 0.0
    handler_ms: float = 0.0
    total_ms: float = 0.0


@dataclass
class OrchestratorResult:
    """Final output returned by a handler / the orchestrator."""

    query: str
    intent: Intent
    answer: str = ""
    classification: Optional[ClassifiedMessage] = None
    state: Optional[ConversationState] = None
    metrics: Optional[OrchestratorMetrics] = None
    used_llm: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
