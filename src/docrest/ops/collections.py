"""
Collection operations: manifest bootstrap and listing.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from docrest.core.errors import DocRestError, InvalidInputError, ManifestError
from docrest.core.logging import get_logger
from docrest.ops.context import OperationContext
from docrest.ops.requests import BootstrapRequest
from docrest.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def bootstrap_collections(
    ctx: OperationContext,
    request: BootstrapRequest,
) -> OperationResult[dict[str, list[str]]]:
    """Create every collection listed in a manifest that does not exist yet.

    The manifest is trusted input: the first invalid name or store failure
    fails the whole bootstrap.
    """
    timer = start_timer()

    try:
        report = ctx.registry.bootstrap(request.manifest_path)
    except DocRestError as exc:
        logger.error("bootstrap_failed", manifest=request.manifest_path, **exc.to_dict())
        if isinstance(exc, (InvalidInputError, ManifestError)):
            code = "INVALID_INPUT"
        else:
            code = "STORAGE_FAILURE"
        return OperationResult.fail(
            code,
            exc.message,
            category=exc.category,
            details=exc.context.to_dict(),
            elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok(asdict(report), elapsed_ms=timer.elapsed_ms)


def list_collections(ctx: OperationContext) -> OperationResult[list[dict[str, Any]]]:
    """Every collection with its identifier-index status."""
    timer = start_timer()

    try:
        collections = ctx.registry.collections()
    except DocRestError as exc:
        logger.error("op_failed", action="list collections", **exc.to_dict())
        return OperationResult.fail(
            "STORAGE_FAILURE",
            f"could not list collections: {exc.message}",
            category=exc.category,
            elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok([asdict(c) for c in collections], elapsed_ms=timer.elapsed_ms)
