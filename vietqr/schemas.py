"""Pydantic schemas for API contracts."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ServiceEnum(str, Enum):
    QRIBFTTA = "QRIBFTTA"
    QRIBFTTC = "QRIBFTTC"


class ModeEnum(str, Enum):
    STATIC = "STATIC"
    DYNAMIC = "DYNAMIC"


class GenerateQRRequest(BaseModel):
    account_or_card_number: str = Field(min_length=1, max_length=19)
    institution_id: str = Field(min_length=1, max_length=11, description="Bank BIN, e.g. 970403")
    service: ServiceEnum = ServiceEnum.QRIBFTTA
    mode: ModeEnum = ModeEnum.DYNAMIC
    amount: str | None = Field(default=None, max_length=13)
    message: str | None = None


class GenerateQRResponse(BaseModel):
    payload: str
    crc: str
    service: ServiceEnum
    mode: ModeEnum


class DecodeQRRequest(BaseModel):
    payload: str = Field(min_length=8)


class TLVField(BaseModel):
    tag: str
    value: str


class DecodeQRResponse(BaseModel):
    crc: str
    crc_valid: bool
    fields: list[TLVField]
    nested: dict[str, list[TLVField]]
