"""Request logging middleware for the warehouse API.

Every request gets a request id (taken from ``X-Request-ID`` when the caller,
e.g. the sync scheduler, sends one) that is attached to all log lines written
while the request is handled and echoed back on the response together with the
processing time.
"""
import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

# Polled by load balancers; not worth a log line per hit
QUIET_PATHS = frozenset({"/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error in %s %s",
                request.method,
                request.url.path,
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            raise
        finally:
            clear_request_context()

        duration_ms = _elapsed_ms(started)
        if request.url.path not in QUIET_PATHS:
            level = logging_level_for(response.status_code)
            logger.log(
                level,
                "%s %s -> %d (%.0f ms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }},
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time-Ms"] = f"{duration_ms:.0f}"
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def logging_level_for(status_code: int) -> int:
    """ERROR for 5xx (Shopify outages land here), WARNING for 4xx."""
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install RequestContextMiddleware on `app`."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
