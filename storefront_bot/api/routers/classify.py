"""Classify router: intent + parameters for one message."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from storefront_bot.api.dependencies import (
    extract_message,
    get_orchestrator,
    get_request_id,
    parse_context,
    parse_state,
    read_json_object,
)
from storefront_bot.api.schemas.chat import ClassifyResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["classify"])


@router.post("/classify", response_model=ClassifyResponse)
async def classify(request: Request, orchestrator=Depends(get_orchestrator)):
    body = await read_json_object(request)
    message = extract_message(body)
    context = parse_context(body.get("context"))
    state = parse_state(body.get("state"))
    request_id = get_request_id(request)

    classification = await orchestrator.classify(message, context, state)
    logger.info(
        "Classified message as %s",
        classification.intent.value,
        extra={"extra": {
            "request_id": request_id,
            "intent": classification.intent.value,
            "language": classification.language.value,
            "context_turns": len(context),
        }},
    )
    return ClassifyResponse(
        intent=classification.intent.value,
        parameters=classification.parameters.to_dict(),
        language=classification.language.value,
        request_id=request_id,
    )
