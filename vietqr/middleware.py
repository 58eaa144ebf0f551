"""Request logging middleware for the QR endpoints."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .monitoring import observe_request

logger = logging.getLogger("vietqr.http")

# Keys handlers may leave on ``request.state.qr`` for the access log.
QR_LOG_KEYS = ("service", "mode", "crc", "crc_valid", "error_code")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


def annotate(request: Request, **fields: Any) -> None:
    """Attach QR details (template, mode, CRC) to the current request's log line."""

    qr = getattr(request.state, "qr", None)
    if qr is None:
        qr = {}
        request.state.qr = qr
    qr.update({k: v for k, v in fields.items() if k in QR_LOG_KEYS})


def _qr_extra(request: Request) -> dict[str, Any]:
    return dict(getattr(request.state, "qr", None) or {})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its route, latency and, for QR routes, template and CRC details."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        start = time.perf_counter()
        client = request.client.host if request.client else None
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            route_path = _route_path(request)
            logger.exception(
                "request failed",
                extra={"method": request.method, "path": route_path, "client": client, **_qr_extra(request)},
            )
            observe_request(request.method, route_path, 500, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        route_path = _route_path(request)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "qr request completed" if route_path.startswith("/v1/qr") else "request completed",
            extra={
                "method": request.method,
                "path": route_path,
                "status_code": response.status_code,
                "client": client,
                "duration_ms": round(duration_ms, 2),
                **_qr_extra(request),
            },
        )
        observe_request(request.method, route_path, response.status_code, duration_ms)
        return response
