"""FastAPI application for vietqr."""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .encoder import BeneficiaryIdentity, GenerationRequest, InitiationMode, ServiceTemplate
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware, annotate
from .monitoring import metrics_payload, record_service_error
from .schemas import (
    DecodeQRRequest,
    DecodeQRResponse,
    GenerateQRRequest,
    GenerateQRResponse,
    ModeEnum,
    ServiceEnum,
    TLVField,
)
from .services.decoder import decode_payload
from .services.errors import ServiceError
from .services.generator import PayloadGenerator

app = FastAPI(title="vietqr", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("vietqr.api")

_MODES = {ModeEnum.STATIC: InitiationMode.STATIC, ModeEnum.DYNAMIC: InitiationMode.DYNAMIC}


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key is using the default value",
            extra={"config_key": "api_key", "environment": settings.environment},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.warning(
        "service error",
        extra={"code": exc.code, "path": route_path, "method": request.method},
    )
    annotate(request, error_code=exc.code)
    record_service_error(exc.code, route_path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.exception(
        "unhandled exception",
        extra={"path": route_path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qr", response_model=GenerateQRResponse, tags=["qr"], dependencies=[Depends(require_api_key)])
async def generate_qr(payload: GenerateQRRequest, request: Request) -> GenerateQRResponse:
    annotate(request, service=payload.service.value, mode=payload.mode.value)
    generator = PayloadGenerator(
        BeneficiaryIdentity(
            account_or_card_number=payload.account_or_card_number,
            institution_id=payload.institution_id,
        )
    )
    encoded = generator.generate(
        GenerationRequest(
            service=ServiceTemplate(payload.service.value),
            mode=_MODES[payload.mode],
            amount=payload.amount,
            message=payload.message,
        )
    )
    annotate(request, crc=encoded.crc)

    return GenerateQRResponse(
        payload=encoded.payload,
        crc=encoded.crc,
        service=ServiceEnum(payload.service.value),
        mode=payload.mode,
    )


@app.post("/v1/qr/decode", response_model=DecodeQRResponse, tags=["qr"], dependencies=[Depends(require_api_key)])
async def decode_qr(payload: DecodeQRRequest, request: Request) -> DecodeQRResponse:
    decoded = decode_payload(payload.payload)
    annotate(request, crc=decoded.crc, crc_valid=decoded.crc_valid)

    return DecodeQRResponse(
        crc=decoded.crc,
        crc_valid=decoded.crc_valid,
        fields=[TLVField(tag=item.tag, value=item.value) for item in decoded.items],
        nested={
            tag: [TLVField(tag=item.tag, value=item.value) for item in items]
            for tag, items in decoded.nested.items()
        },
    )
