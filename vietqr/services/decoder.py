"""Payload decoding and CRC verification."""
from __future__ import annotations

from dataclasses import dataclass, field

from ..crc import crc16_ccitt
from ..encoder import CRC_PLACEHOLDER
from ..tlv import TLVItem, parse_tlv
from .errors import err_bad_payload

# Templates whose value is itself a TLV stream.
NESTED_TEMPLATES = frozenset({"38", "62"})


@dataclass(slots=True)
class DecodedPayload:
    items: list[TLVItem]
    nested: dict[str, list[TLVItem]] = field(default_factory=dict)
    crc: str = ""
    crc_valid: bool = False

    def get(self, tag: str) -> str | None:
        for item in self.items:
            if item.tag == tag:
                return item.value
        return None


def split_crc(payload: str) -> tuple[str, str]:
    """Split a full payload into the checksummed body and its 4-digit trailer."""

    if len(payload) < 8 or payload[-8:-4] != CRC_PLACEHOLDER:
        raise err_bad_payload("Payload does not end with a Tag 63 CRC field")
    return payload[:-4], payload[-4:]


def verify_crc(payload: str) -> bool:
    body, crc = split_crc(payload)
    return crc16_ccitt(body) == crc.upper()


def _parse(payload: str) -> list[TLVItem]:
    try:
        return list(parse_tlv(payload))
    except ValueError as exc:
        raise err_bad_payload(str(exc)) from exc


def decode_payload(payload: str) -> DecodedPayload:
    """Parse a full payload into its top-level and nested TLV fields."""

    body, crc = split_crc(payload)
    items = _parse(payload)
    if not items or items[-1].tag != "63":
        raise err_bad_payload("Tag 63 must be the last field")

    nested: dict[str, list[TLVItem]] = {}
    for item in items:
        if item.tag in NESTED_TEMPLATES:
            nested[item.tag] = _parse(item.value)
    for sub in nested.get("38", []):
        if sub.tag == "01":
            nested["38.01"] = _parse(sub.value)

    return DecodedPayload(
        items=items,
        nested=nested,
        crc=crc,
        crc_valid=crc16_ccitt(body) == crc.upper(),
    )
