"""Pydantic v2 schemas for the classify / chat / answer API."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ContextTurnSchema(BaseModel):
    """One prior turn; role and content must both be strings."""

    model_config = ConfigDict(extra="ignore")

    role: StrictStr
    content: StrictStr


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ClassifyResponse(_CamelModel):
    intent: str
    parameters: Dict[str, Any]
    language: str
    request_id: str = Field(alias="requestId")


class ChatResponse(_CamelModel):
    response: str
    intent: str
    state: Dict[str, Any]
    request_id: str = Field(alias="requestId")
    timestamp: str


class AnswerResponse(_CamelModel):
    answer: str
    cached: bool
    timestamp: str
    request_id: str = Field(alias="requestId")
