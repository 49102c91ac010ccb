"""
Error handling -- maps operation error codes to HTTP responses.

Every non-2xx body has the same shape: ``{"error": "<message>"}``.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docrest.core.logging import get_logger

logger = get_logger(__name__)

# ── Error code → HTTP status mapping ─────────────────────────────────────

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "INVALID_INPUT": 400,
    "NOT_FOUND": 422,
    "NOT_IMPLEMENTED": 501,
    "STORAGE_FAILURE": 500,
    "IDENTIFIER_GENERATION_FAILED": 500,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an ops error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def error_response(status: int, message: str) -> JSONResponse:
    """Build a ``{"error": message}`` JSON response."""
    return JSONResponse(status_code=status, content={"error": message})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or a non-object body is a client error (400)."""
    errors = exc.errors()
    reason = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return error_response(400, f"request body does not contain valid json: {reason}")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and methods keep the ``{"error": ...}`` body shape."""
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions -- returns 500."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    detail = str(exc) if request.app.state.settings.debug else "an unexpected error occurred"
    return error_response(500, detail)
