"""Payload generation service."""
from __future__ import annotations

import logging

from ..encoder import BeneficiaryIdentity, EncodedPayload, GenerationRequest, InitiationMode, encode
from ..monitoring import record_payload_generated
from .errors import ServiceError

logger = logging.getLogger("vietqr.generator")


class PayloadGenerator:
    def __init__(self, identity: BeneficiaryIdentity):
        self.identity = identity

    def generate(self, request: GenerationRequest) -> EncodedPayload:
        if request.mode is InitiationMode.STATIC:
            request = GenerationRequest(service=request.service, mode=request.mode)
        try:
            encoded = encode(self.identity, request)
        except ServiceError as exc:
            logger.info(
                "payload rejected",
                extra={"code": exc.code, "service": request.service.value, "mode": request.mode.name},
            )
            raise

        record_payload_generated(request.service.value, request.mode.name)
        logger.info(
            "payload generated",
            extra={
                "service": request.service.value,
                "mode": request.mode.name,
                "institution_id": self.identity.institution_id,
                "crc": encoded.crc,
                "length": len(encoded.payload),
            },
        )
        return encoded
