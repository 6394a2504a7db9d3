"""Pydantic v2 schemas for address validation."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddressValidationData(_CamelModel):
    formatted_address: str = Field(alias="formattedAddress")
    multiple_candidates: bool = Field(alias="multipleCandidates")
    address_candidates: List[str] = Field(alias="addressCandidates")
    validation_status: str = Field(alias="validationStatus")


class AddressValidationResponse(_CamelModel):
    success: bool = True
    data: AddressValidationData
    request_id: str = Field(alias="requestId")


class ResponseMetadata(_CamelModel):
    timestamp: str
    request_id: str = Field(alias="requestId")


class ExternalAddressValidationResponse(AddressValidationResponse):
    metadata: ResponseMetadata
