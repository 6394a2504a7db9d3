"""Address validation routes: internal (widget) and external (partner, API key + rate limit)."""
from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from storefront_bot.api.dependencies import (
    get_address_validator,
    get_request_id,
    read_json_object,
    require_external_api_key,
    utc_timestamp,
)
from storefront_bot.api.schemas.address import (
    AddressValidationData,
    AddressValidationResponse,
    ExternalAddressValidationResponse,
    ResponseMetadata,
)
from storefront_bot.core.exceptions import AddressValidationDeniedError, ProjectError, ValidationError
from storefront_bot.orchestrator.types import AddressValidationResult

logger = logging.getLogger(__name__)
router = APIRouter(tags=["address"])
limiter = Limiter(key_func=get_remote_address)

EXTERNAL_RATE_LIMIT = os.environ.get("EXTERNAL_VALIDATE_RATE_LIMIT", "100/hour")


async def _validate(request: Request, validator) -> AddressValidationResult:
    body = await read_json_object(request)
    address = body.get("address")
    if not isinstance(address, str) or not address.strip():
        raise ValidationError("address must be a non-empty string", code="INVALID_INPUT")
    try:
        return await validator.validate(address)
    except AddressValidationDeniedError as exc:
        raise ProjectError(
            "Address validation is unavailable",
            code="VALIDATION_ERROR",
            http_status=500,
            cause=exc,
        ) from exc


@router.post("/validate-address", response_model=AddressValidationResponse)
async def validate_address(request: Request, validator=Depends(get_address_validator)):
    result = await _validate(request, validator)
    return AddressValidationResponse(
        data=AddressValidationData(**result.to_dict()),
        request_id=get_request_id(request),
    )


@router.post(
    "/external/validate-address",
    response_model=ExternalAddressValidationResponse,
    dependencies=[Depends(require_external_api_key)],
)
@limiter.limit(EXTERNAL_RATE_LIMIT)
async def validate_address_external(request: Request, validator=Depends(get_address_validator)):
    result = await _validate(request, validator)
    request_id = get_request_id(request)
    logger.info(
        "External address validation: %s",
        result.validation_status,
        extra={"extra": {"request_id": request_id, "candidates": len(result.address_candidates)}},
    )
    return ExternalAddressValidationResponse(
        data=AddressValidationData(**result.to_dict()),
        request_id=request_id,
        metadata=ResponseMetadata(timestamp=utc_timestamp(), request_id=request_id),
    )
