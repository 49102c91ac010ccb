"""
Shared API router utilities.

- ``_handle_error()`` -- convert a failed OperationResult to ``{"error": ...}``
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from docrest.api.middleware.errors import error_response, status_for_error_code
from docrest.ops.result import OperationResult


def _handle_error(result: OperationResult[Any]) -> JSONResponse:
    """Render a failed result with the status its error code maps to."""
    code = result.error.code if result.error else "INTERNAL"
    message = result.error.message if result.error else "operation failed"
    return error_response(status_for_error_code(code), message)
