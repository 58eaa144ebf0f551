"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


class ValidationError(ServiceError):
    """Caller input rejected before any payload was produced."""


class EncodingRangeError(ServiceError):
    """Checksum input holds a character that does not fit in one byte."""


MESSAGE_RULE = "message exceeds 25 characters or contains characters outside letters/digits/space"


def err_validation(message: str | None = None) -> ValidationError:
    return ValidationError(code="ERR_VALIDATION", message=message or MESSAGE_RULE, status_code=422)


def err_bad_payload(message: str | None = None) -> ValidationError:
    return ValidationError(code="ERR_BAD_PAYLOAD", message=message or "Invalid QR payload", status_code=400)


def err_encoding_range(message: str | None = None) -> EncodingRangeError:
    return EncodingRangeError(
        code="ERR_ENCODING_RANGE",
        message=message or "payload contains a character above code point 255",
        status_code=422,
    )
