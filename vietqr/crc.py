"""CRC16-CCITT implementation."""
from __future__ import annotations

from typing import Final

from .services.errors import err_encoding_range

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF


def _build_table(poly: int) -> tuple[int, ...]:
    table = []
    for byte in range(256):
        value = byte << 8
        for _ in range(8):
            if value & 0x8000:
                value = (value << 1) ^ poly
            else:
                value <<= 1
            value &= 0xFFFF
        table.append(value)
    return tuple(table)


CRC16_TABLE: Final = _build_table(CRC16_POLY)


def crc16_ccitt_int(data: str) -> int:
    """Compute the raw CRC16-CCITT register for a payload string.

    Every character is fed to the register as a single byte, so code points
    above 0xFF are rejected.
    """

    checksum = CRC16_INIT
    for position, ch in enumerate(data):
        code = ord(ch)
        if code > 0xFF:
            raise err_encoding_range(f"character {ch!r} at position {position} is outside the single-byte range")
        index = (code ^ (checksum >> 8)) & 0xFF
        checksum = (CRC16_TABLE[index] ^ (checksum << 8)) & 0xFFFF
    return checksum


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT (0x1021) for EMV payload strings."""

    return f"{crc16_ccitt_int(data):04X}"
