"""Canned customer-facing strings, one entry per situation, keyed by language."""
from __future__ import annotations

from typing import Dict

from storefront_bot.clients.commerce.base import EMAIL_MISMATCH
from storefront_bot.orchestrator.types import Language

_REPLIES: Dict[str, Dict[Language, str]] = {
    "conversation_end": {
        Language.SPANISH: "¡Gracias a ti! Si necesitas algo más, aquí estaré. ¡Que tengas un gran día! 😊",
        Language.ENGLISH: "Thank you! If you need anything else, I'm here. Have a great day! 😊",
    },
    "error": {
        Language.SPANISH: "Lo siento, ha ocurrido un error. Por favor, inténtalo de nuevo en unos minutos.",
        Language.ENGLISH: "Sorry, something went wrong. Please try again in a few minutes.",
    },
    "need_order_identity": {
        Language.SPANISH: "Para ayudarte mejor, necesito tu número de pedido (tipo #12345) y tu email 😊",
        Language.ENGLISH: "To better help you with your order-related query, I need your order number (like #12345) and email 😊",
    },
    "invalid_order_number": {
        Language.SPANISH: "No encuentro ningún pedido con ese número. ¿Puedes revisarlo? Debería ser algo como #12345.",
        Language.ENGLISH: "I couldn't find an order with that number. Could you double-check it? It should look like #12345.",
    },
    "email_mismatch": {
        Language.SPANISH: "El email no coincide con el del pedido. ¿Puedes confirmar el email que usaste al comprar?",
        Language.ENGLISH: "That email doesn't match the one on the order. Could you confirm the email you used at checkout?",
    },
    "ask_delivery_address": {
        Language.SPANISH: "¿Cuál es la nueva dirección de entrega completa (calle, número, ciudad y código postal)?",
        Language.ENGLISH: "What is the full new delivery address (street, number, city and postcode)?",
    },
    "address_not_validated": {
        Language.SPANISH: "No he podido validar esa dirección. ¿Puedes escribirla completa, con ciudad y código postal?",
        Language.ENGLISH: "I couldn't validate that address. Could you write it in full, including city and postcode?",
    },
    "address_update_requested": {
        Language.SPANISH: "¡Perfecto! He pedido que el pedido #{order_number} se envíe a {address}. Te confirmaremos el cambio por email.",
        Language.ENGLISH: "Perfect! I've requested that order #{order_number} ships to {address}. We'll confirm the change by email.",
    },
    "address_single_candidate": {
        Language.SPANISH: "¿Es esta la dirección correcta?\n{address}\nResponde \"sí\" para confirmarla.",
        Language.ENGLISH: "Is this the right address?\n{address}\nReply \"yes\" to confirm it.",
    },
    "address_multiple_candidates": {
        Language.SPANISH: "He encontrado varias direcciones posibles:\n{candidates}\n¿Cuál es la correcta?",
        Language.ENGLISH: "I found several possible addresses:\n{candidates}\nWhich one is right?",
    },
    "returns_instructions": {
        Language.SPANISH: "Puedes gestionar tu devolución o cambio desde nuestro portal: {url}\nSolo necesitas tu número de pedido y tu email.",
        Language.ENGLISH: "You can start your return or exchange from our returns portal: {url}\nYou'll just need your order number and email.",
    },
    "returns_reminder": {
        Language.SPANISH: "Como te comentaba, la devolución se hace desde el portal: {url}. ¿Te ayudo con algo más?",
        Language.ENGLISH: "As mentioned, returns are handled through the portal: {url}. Anything else I can help with?",
    },
    "promo_ask_email": {
        Language.SPANISH: "¡Claro! Déjame tu email y te enviaremos un código de descuento para tu próxima compra.",
        Language.ENGLISH: "Sure! Leave me your email and we'll send you a discount code for your next order.",
    },
    "promo_subscribed": {
        Language.SPANISH: "¡Hecho! Te enviaremos el código de descuento a {email}.",
        Language.ENGLISH: "Done! We'll send the discount code to {email}.",
    },
    "ask_product": {
        Language.SPANISH: "¿De qué producto me hablas? Dime el nombre tal como aparece en la web.",
        Language.ENGLISH: "Which product do you mean? Tell me its name as it appears on the website.",
    },
    "ask_size": {
        Language.SPANISH: "¿Qué talla te interesa del {product}? (XS, S, M, L, XL o XXL)",
        Language.ENGLISH: "Which size of the {product} are you after? (XS, S, M, L, XL or XXL)",
    },
    "restock_in_stock": {
        Language.SPANISH: "¡Buenas noticias! El {product} en talla {size} está disponible ahora mismo.",
        Language.ENGLISH: "Good news! The {product} in size {size} is available right now.",
    },
    "restock_ask_email": {
        Language.SPANISH: "El {product} en talla {size} está agotado. Si me dejas tu email, te avisamos en cuanto vuelva.",
        Language.ENGLISH: "The {product} in size {size} is sold out. Leave me your email and we'll let you know as soon as it's back.",
    },
    "restock_notify": {
        Language.SPANISH: "¡Apuntado! Te avisaremos en {email} cuando el {product} en talla {size} vuelva a estar disponible.",
        Language.ENGLISH: "Noted! We'll email {email} as soon as the {product} in size {size} is back in stock.",
    },
    "invoice_sent": {
        Language.SPANISH: "¡Listo! Te enviaremos la factura del pedido {order_name} a {email}.",
        Language.ENGLISH: "Done! We'll send the invoice for order {order_name} to {email}.",
    },
    "ask_update_type": {
        Language.SPANISH: "¿Qué quieres cambiar del pedido: la dirección de envío o algún producto?",
        Language.ENGLISH: "What would you like to change on the order: the shipping address or a product?",
    },
}


def reply(key: str, language: Language, **values: str) -> str:
    """Localized canned string; ``values`` fill its placeholders."""
    text = _REPLIES[key].get(language) or _REPLIES[key][Language.ENGLISH]
    return text.format(**values) if values else text


def invalid_credentials(language: Language, error: str) -> str:
    key = "email_mismatch" if error == EMAIL_MISMATCH else "invalid_order_number"
    return reply(key, language)
