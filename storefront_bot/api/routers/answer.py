"""Answer router: generate (or replay from cache) a reply for an already classified message."""
from __future__ import annotations

import asyncio
import logging
import os

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from storefront_bot.api.dependencies import (
    get_answer_cache,
    get_orchestrator,
    get_request_id,
    parse_context,
    read_json_object,
    utc_timestamp,
)
from storefront_bot.api.schemas.chat import AnswerResponse
from storefront_bot.clients.commerce.base import OrderLookup
from storefront_bot.core.exceptions import GatewayTimeoutError, ValidationError
from storefront_bot.orchestrator.cache import answer_cache_key
from storefront_bot.orchestrator.types import Intent, Language, ParameterSet

logger = logging.getLogger(__name__)
router = APIRouter(tags=["answer"])
limiter = Limiter(key_func=get_remote_address)

ANSWER_RATE_LIMIT = os.environ.get("ANSWER_RATE_LIMIT", "30/minute")

_VALID_INTENTS = {intent.value for intent in Intent}


@router.post("/answer", response_model=AnswerResponse)
@limiter.limit(ANSWER_RATE_LIMIT)
async def answer(
    request: Request,
    orchestrator=Depends(get_orchestrator),
    cache=Depends(get_answer_cache),
):
    body = await read_json_object(request)

    intent_raw = body.get("intent")
    if not isinstance(intent_raw, str) or not intent_raw.strip():
        raise ValidationError("intent must be a non-empty string", code="INVALID_INTENT")
    if intent_raw not in _VALID_INTENTS:
        raise ValidationError(f"Unknown intent {intent_raw!r}", code="INVALID_INTENT_VALUE")

    user_message = body.get("userMessage")
    if not isinstance(user_message, str) or not user_message.strip():
        raise ValidationError("userMessage must be a non-empty string", code="INVALID_USER_MESSAGE")

    raw_params = body.get("parameters")
    if not isinstance(raw_params, dict):
        raise ValidationError("parameters must be an object", code="INVALID_PARAMETERS")

    context = parse_context(body.get("context"))

    size_charts = body.get("sizeCharts")
    if size_charts is not None and not isinstance(size_charts, str):
        raise ValidationError("sizeCharts must be a string", code="INVALID_SIZE_CHARTS")

    raw_commerce = body.get("shopifyData")
    commerce_data = None
    if raw_commerce is not None:
        try:
            commerce_data = OrderLookup.from_dict(raw_commerce)
        except (ValueError, TypeError) as exc:
            raise ValidationError(
                "shopifyData must be an order/product lookup object",
                code="INVALID_SHOPIFY_DATA",
                cause=exc,
            ) from exc

    intent = Intent(intent_raw)
    language = Language.parse(body.get("language"))
    parameters = ParameterSet.from_dict(raw_params)
    request_id = get_request_id(request)

    key = answer_cache_key(
        intent=intent.value,
        parameters=parameters.to_dict(),
        user_message=user_message,
        context=context,
        language=language.value,
        size_charts=size_charts,
        shopify_data=raw_commerce,
    )
    hit = cache.get(key)
    if hit is not None:
        return AnswerResponse(
            answer=hit.answer,
            cached=True,
            timestamp=utc_timestamp(hit.created_at),
            request_id=request_id,
        )

    timeout = orchestrator.config.answer_timeout_seconds
    try:
        text = await asyncio.wait_for(
            orchestrator.answer_generator.generate(
                intent,
                parameters,
                commerce_data,
                user_message,
                context,
                language,
                size_charts,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("Answer generation timed out (%.0fs)", timeout)
        raise GatewayTimeoutError("Answer generation timed out") from exc

    stored = cache.put(key, text)
    return AnswerResponse(
        answer=text,
        cached=False,
        timestamp=utc_timestamp(stored.created_at),
        request_id=request_id,
    )
