"""FastAPI dependency providers and request helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import uuid4

from fastapi import HTTPException, Request, status
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront_bot.api.schemas.chat import ContextTurnSchema
from storefront_bot.core.exceptions import (
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from storefront_bot.orchestrator.types import ConversationState, ConversationTurn

_CONTEXT_ADAPTER = TypeAdapter(List[ContextTurnSchema])


def _from_state(request: Request, name: str, label: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialised. Check server startup logs.",
        )
    return value


def get_orchestrator(request: Request):
    """Access the pre-built orchestrator from app.state."""
    return _from_state(request, "orchestrator", "Orchestrator")


def get_answer_cache(request: Request):
    return _from_state(request, "answer_cache", "Answer cache")


def get_address_validator(request: Request):
    return _from_state(request, "address_validator", "Address validator")


def require_external_api_key(request: Request) -> None:
    """X-Api-Key must equal EXTERNAL_API_KEY; an unset key locks the route."""
    settings = getattr(request.app.state, "settings", None)
    expected = getattr(settings, "external_api_key", None)
    provided = request.headers.get("X-Api-Key")
    if not expected or provided != expected:
        raise UnauthorizedError("Invalid or missing API key")


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = uuid4().hex
        request.state.request_id = request_id
    return request_id


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now(timezone.utc)).isoformat()


# ── Body parsing ───────────────────────────────────────────────────────────


async def read_json_object(request: Request) -> dict:
    """Body as a JSON object: 415 when not JSON, 400 INVALID_JSON when unparsable or not an object."""
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        raise UnsupportedMediaTypeError("Content-Type must be application/json")
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON", code="INVALID_JSON", cause=exc) from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", code="INVALID_JSON")
    return body


def extract_message(body: dict) -> str:
    """Accepts {"message": str}, {"message": {"text": str}} and {"text": str}."""
    if "message" in body:
        raw = body["message"]
        if isinstance(raw, dict):
            if "text" not in raw:
                raise ValidationError("message object must carry a text field", code="INVALID_FORMAT")
            raw = raw["text"]
    elif "text" in body:
        raw = body["text"]
    else:
        raise ValidationError(
            "Expected {message}, {message: {text}} or {text}", code="INVALID_FORMAT"
        )
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Message must be a non-empty string", code="INVALID_MESSAGE")
    return raw


def parse_context(raw: Any) -> List[ConversationTurn]:
    if raw is None:
        return []
    try:
        turns = _CONTEXT_ADAPTER.validate_python(raw)
    except PydanticValidationError as exc:
        raise ValidationError(
            "context must be a list of {role, content} string objects",
            code="INVALID_CONTEXT",
            cause=exc,
        ) from exc
    return [{"role": t.role, "content": t.content} for t in turns]


def parse_state(raw: Any) -> Optional[ConversationState]:
    if raw is None:
        return None
    try:
        return ConversationState.from_dict(raw)
    except ValueError as exc:
        raise ValidationError(str(exc), code="INVALID_STATE", cause=exc) from exc
