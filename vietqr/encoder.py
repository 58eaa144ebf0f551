"""VietQR payload encoder for NAPAS inter-bank fund transfers."""
from __future__ import annotations

import enum
import string
from dataclasses import dataclass
from typing import Iterable

from .crc import crc16_ccitt
from .services.errors import err_validation
from .tlv import TLVItem, build_tlv

PAYLOAD_FORMAT_INDICATOR = "01"
NAPAS_GUID = "A000000727"
CURRENCY_VND = "704"
COUNTRY_CODE = "VN"
CRC_PLACEHOLDER = "6304"
MESSAGE_MAX_LENGTH = 25

_MESSAGE_ALPHABET = frozenset(string.ascii_letters + string.digits + " ")


class ServiceTemplate(str, enum.Enum):
    PUSH = "QRPUSH"
    CASH = "QRCASH"
    TRANSFER_TO_CARD = "QRIBFTTC"
    TRANSFER_TO_ACCOUNT = "QRIBFTTA"


class InitiationMode(str, enum.Enum):
    STATIC = "11"
    DYNAMIC = "12"


@dataclass(frozen=True)
class BeneficiaryIdentity:
    account_or_card_number: str
    institution_id: str

    def to_subitems(self) -> Iterable[TLVItem]:
        yield TLVItem(tag="00", value=self.institution_id)
        yield TLVItem(tag="01", value=self.account_or_card_number)


@dataclass(frozen=True)
class GenerationRequest:
    service: ServiceTemplate
    mode: InitiationMode
    amount: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class EncodedPayload:
    payload: str
    crc: str


def validate_message(message: str) -> None:
    """Reject purpose-of-transaction text the NAPAS readers will not accept."""

    if not 1 <= len(message) <= MESSAGE_MAX_LENGTH or not _MESSAGE_ALPHABET.issuperset(message):
        raise err_validation()


def merchant_account_information(identity: BeneficiaryIdentity, service: ServiceTemplate) -> TLVItem:
    """Build Tag 38: GUID, payment network block and service code."""

    network = build_tlv(identity.to_subitems())
    value = build_tlv(
        [
            TLVItem(tag="00", value=NAPAS_GUID),
            TLVItem(tag="01", value=network),
            TLVItem(tag="02", value=service.value),
        ]
    )
    return TLVItem(tag="38", value=value)


def _top_level_items(identity: BeneficiaryIdentity, request: GenerationRequest) -> Iterable[TLVItem]:
    yield TLVItem(tag="00", value=PAYLOAD_FORMAT_INDICATOR)
    yield TLVItem(tag="01", value=request.mode.value)
    yield merchant_account_information(identity, request.service)
    yield TLVItem(tag="53", value=CURRENCY_VND)
    if request.amount:
        yield TLVItem(tag="54", value=request.amount)
    yield TLVItem(tag="58", value=COUNTRY_CODE)
    if request.message:
        yield TLVItem(tag="62", value=TLVItem(tag="08", value=request.message).serialize())


def assemble(identity: BeneficiaryIdentity, request: GenerationRequest) -> str:
    """Return the ordered payload up to and including the CRC placeholder."""

    if request.message:
        validate_message(request.message)
    return build_tlv(_top_level_items(identity, request)) + CRC_PLACEHOLDER


def encode(identity: BeneficiaryIdentity, request: GenerationRequest) -> EncodedPayload:
    """Assemble the payload and append its CRC16-CCITT trailer."""

    payload_no_crc = assemble(identity, request)
    crc = crc16_ccitt(payload_no_crc)
    return EncodedPayload(payload=f"{payload_no_crc}{crc}", crc=crc)


class VietQR:
    """Payload factory bound to one beneficiary account or card.

    ``institution_id`` is the BIN registered with the State Bank of Vietnam,
    e.g. ``970403``.
    """

    def __init__(self, account_or_card_number: str, institution_id: str):
        self.identity = BeneficiaryIdentity(
            account_or_card_number=account_or_card_number,
            institution_id=institution_id,
        )

    def generate(self, request: GenerationRequest) -> str:
        return encode(self.identity, request).payload

    def dynamic_transfer_to_account(self, amount: str, message: str) -> str:
        return self.generate(
            GenerationRequest(
                service=ServiceTemplate.TRANSFER_TO_ACCOUNT,
                mode=InitiationMode.DYNAMIC,
                amount=amount,
                message=message,
            )
        )

    def dynamic_transfer_to_card(self, amount: str, message: str) -> str:
        return self.generate(
            GenerationRequest(
                service=ServiceTemplate.TRANSFER_TO_CARD,
                mode=InitiationMode.DYNAMIC,
                amount=amount,
                message=message,
            )
        )

    def static_transfer_to_account(self) -> str:
        return self.generate(GenerationRequest(service=ServiceTemplate.TRANSFER_TO_ACCOUNT, mode=InitiationMode.STATIC))

    def static_transfer_to_card(self) -> str:
        return self.generate(GenerationRequest(service=ServiceTemplate.TRANSFER_TO_CARD, mode=InitiationMode.STATIC))


def new_encoder(account_or_card_number: str, institution_id: str) -> VietQR:
    return VietQR(account_or_card_number, institution_id)
