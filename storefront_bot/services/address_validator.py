"""Address validation against the Google Places "find place from text" endpoint."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from storefront_bot.core.exceptions import AddressValidationDeniedError
from storefront_bot.orchestrator.types import AddressValidationResult

logger = logging.getLogger(__name__)

PLACES_URL = "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"


class AddressValidator:
    """No retries. A denied key raises; any other failure reads as "no match"."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def validate(self, address: str) -> AddressValidationResult:
        if not isinstance(address, str) or not address.strip():
            return AddressValidationResult()
        if not self._api_key:
            logger.warning("AddressValidator: GOOGLE_MAPS_API_KEY is not set")
            return AddressValidationResult()

        params = {
            "input": address.strip(),
            "inputtype": "textquery",
            "fields": "formatted_address",
            "key": self._api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(PLACES_URL, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("AddressValidator: request failed: %s", exc)
            return AddressValidationResult()
        except ValueError:
            logger.warning("AddressValidator: response was not JSON")
            return AddressValidationResult()
        if not isinstance(payload, dict):
            logger.warning("AddressValidator: unexpected response shape %s", type(payload).__name__)
            return AddressValidationResult()

        status = payload.get("status")
        if status == "REQUEST_DENIED":
            raise AddressValidationDeniedError(
                "Address provider denied the request",
                details={"provider_message": payload.get("error_message", "")},
            )
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning("AddressValidator: provider status %s", status)

        candidates = [
            c["formatted_address"]
            for c in payload.get("candidates") or []
            if isinstance(c, dict) and c.get("formatted_address")
        ]
        return AddressValidationResult(
            formatted_address=candidates[0] if candidates else "",
            multiple_candidates=len(candidates) > 1,
            address_candidates=candidates,
        )
