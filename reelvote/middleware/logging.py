"""Request logging with per-request ids."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

# Polled by load balancers; logging every check drowns the event log
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id into structlog context vars and log request timing.

    An incoming ``X-Request-ID`` header is reused so ids can be correlated
    across a proxy; otherwise a fresh UUID is minted. The id is echoed on the
    response either way.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()
        if not quiet:
            logger.info(
                "request_started",
                client_host=request.client.host if request.client else None,
                query=str(request.query_params) or None,
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception_type=type(exc).__name__,
                exception=str(exc),
                duration_ms=_elapsed_ms(started),
            )
            raise

        response.headers["X-Request-ID"] = request_id
        if not quiet:
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
