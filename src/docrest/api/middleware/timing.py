"""Timing middleware.

Every response carries ``X-Process-Time-Ms``.  Requests slower than
``slow_request_ms`` are logged as ``slow_request`` with method, path and
status.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from docrest.core.logging import get_logger

logger = get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, slow_request_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started_ns = time.monotonic_ns()
        response = await call_next(request)
        elapsed_ms = (time.monotonic_ns() - started_ns) / 1_000_000

        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.2f}"
        if elapsed_ms >= self.slow_request_ms:
            logger.warning(
                "slow_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                elapsed_ms=round(elapsed_ms, 2),
            )
        return response
