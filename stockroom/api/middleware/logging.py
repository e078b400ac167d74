"""Request logging middleware."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from stockroom.config import get_logger

logger = get_logger(__name__)

# Health check endpoints are logged at debug level only
QUIET_PATHS = frozenset({"/health", "/api/health", "/api/health/db"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its outcome and duration.

    The request ID and the X-Actor-Id header are bound to structlog
    contextvars, so ledger events logged while the request runs carry both.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            actor_id=request.headers.get("X-Actor-Id"),
        ):
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=path,
                    error=str(e),
                    duration_ms=_elapsed_ms(start),
                )
                raise

            log(
                "request_completed",
                method=request.method,
                path=path,
                status=response.status_code,
                duration_ms=_elapsed_ms(start),
            )

        response.headers["X-Request-ID"] = request_id
        return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
