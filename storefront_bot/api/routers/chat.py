"""Chat router: one customer turn in, one reply out."""
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
    utc_timestamp,
)
from storefront_bot.api.schemas.chat import ChatResponse
from storefront_bot.core.exceptions import ValidationError
from storefront_bot.services.ticket_service import Ticket

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(request: Request, orchestrator=Depends(get_orchestrator)):
    body = await read_json_object(request)
    message = extract_message(body)
    context = parse_context(body.get("context"))
    state = parse_state(body.get("state"))

    raw_ticket = body.get("currentTicket")
    if raw_ticket is not None and not isinstance(raw_ticket, dict):
        raise ValidationError("currentTicket must be an object", code="INVALID_TICKET")
    ticket = Ticket.from_dict(raw_ticket) if raw_ticket else None

    result = await orchestrator.process(
        message,
        context=context,
        state=state,
        current_ticket=ticket,
    )
    request_id = get_request_id(request)
    logger.info(
        "Chat reply for %s",
        result.intent.value,
        extra={"extra": {
            "request_id": request_id,
            "intent": result.intent.value,
            "used_llm": result.used_llm,
            "total_ms": result.metrics.total_ms if result.metrics else None,
        }},
    )
    return ChatResponse(
        response=result.answer,
        intent=result.intent.value,
        state=result.state.to_dict() if result.state else {"classifications": []},
        request_id=request_id,
        timestamp=utc_timestamp(),
    )
