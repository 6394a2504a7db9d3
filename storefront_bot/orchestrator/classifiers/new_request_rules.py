"""
Keyword decision tables used by the context resolver.

Each table is an ordered tuple evaluated first-match-wins, so the keyword
lists can be edited and tested without touching the resolver.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from storefront_bot.orchestrator.types import Intent

Predicate = Callable[[str], bool]


def any_of(*words: str) -> Predicate:
    return lambda text: any(w in text for w in words)


def all_of(*predicates: Predicate) -> Predicate:
    return lambda text: all(p(text) for p in predicates)


# Phrases in the customer's turn that announce a fresh topic.
FRESH_START_PHRASES: Tuple[str, ...] = (
    "otro pedido",
    "otra orden",
    "otra cosa",
    "algo más",
    "quiero",
    "necesito",
    "tengo",
    "buscar",
    "another order",
    "something else",
    "want to",
    "need to",
    "have",
    "find",
    "track",
)

# The assistant's last turn closed the previous topic.
CONCLUSION_RULES: Tuple[Tuple[str, Predicate], ...] = (
    ("closing", any_of("que tengas", "have a great", "gracias", "thank you")),
    ("tracking_sent", all_of(any_of("pedido"), any_of("número de seguimiento", "tracking number"))),
    ("return_explained_es", all_of(any_of("devolución"), any_of("procedimiento"))),
    ("return_explained_en", all_of(any_of("return"), any_of("procedure"))),
    ("size_recommended_es", all_of(any_of("talla"), any_of("recomendación"))),
    ("size_recommended_en", all_of(any_of("size"), any_of("recommendation"))),
)

# Topic keywords -> intent, for a message that starts a new request.
TOPIC_RULES: Tuple[Tuple[Predicate, Intent], ...] = (
    (
        all_of(any_of("pedido"), any_of("localizar", "donde", "dónde", "buscar", "track", "where", "find")),
        Intent.ORDER_TRACKING,
    ),
    (any_of("devolver", "cambiar", "return", "exchange", "devolución", "cambio"), Intent.RETURNS_EXCHANGE),
    (any_of("talla", "tamaño", "size", "fit", "medida"), Intent.PRODUCT_SIZING),
    (any_of("disponible", "stock", "available", "cuando", "cuándo", "when"), Intent.RESTOCK),
    (any_of("descuento", "promo", "discount", "offer", "código", "code"), Intent.PROMO_CODE),
    (any_of("factura", "recibo", "invoice", "receipt"), Intent.INVOICE_REQUEST),
    (
        any_of("no he recibido", "no llega", "haven't received", "not arrived", "problema", "problem"),
        Intent.DELIVERY_ISSUE,
    ),
    (
        any_of("cambiar dirección", "nueva dirección", "change address", "new address", "dirección", "address"),
        Intent.CHANGE_DELIVERY,
    ),
    (
        any_of(
            "actualizar pedido", "modificar pedido", "update order",
            "modify order", "cambiar pedido", "change order",
        ),
        Intent.UPDATE_ORDER,
    ),
    (any_of("pedido", "order"), Intent.OTHER_ORDER),
)


def has_fresh_start_phrase(text: str, phrases: Sequence[str] = FRESH_START_PHRASES) -> bool:
    low = text.lower()
    return any(p in low for p in phrases)


def matching_conclusion(agent_text: str) -> Optional[str]:
    """Name of the first conclusion rule the assistant turn satisfies, else None."""
    low = agent_text.lower()
    for name, predicate in CONCLUSION_RULES:
        if predicate(low):
            return name
    return None


def topic_intent(text: str) -> Intent:
    low = text.lower()
    for predicate, intent in TOPIC_RULES:
        if predicate(low):
            return intent
    return Intent.OTHER_GENERAL
