"""
Per-request log context.

Every event logged while a request is served (allocations, settlement
deltas, payments) carries its request_id. The id is echoed back in
X-Request-ID, with the handling time in X-Response-Time.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from scentledger.config import get_logger

logger = get_logger(__name__)


def _elapsed_ms(since: float) -> float:
    return round((time.perf_counter() - since) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        began = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error("request_failed", error=str(e), duration_ms=_elapsed_ms(began))
                raise

            duration_ms = _elapsed_ms(began)
            if response.status_code >= 400:
                logger.warning("request_completed", status=response.status_code, duration_ms=duration_ms)
            else:
                logger.info("request_completed", status=response.status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
