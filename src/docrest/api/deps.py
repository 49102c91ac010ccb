"""
FastAPI dependency injection -- shared singletons and per-request factories.

The document store, collection registry and identifier policy are opened
once by the application lifespan and parked on ``app.state``; every request
gets a fresh :class:`OperationContext` that points at them.

Usage in routers::

    from docrest.api.deps import OpContext

    @router.get("/{collection}")
    def list_documents(collection: str, ctx: OpContext):
        ...
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from docrest.api.settings import DocRestAPISettings
from docrest.ops.context import OperationContext

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> DocRestAPISettings:
    """Cached settings -- loaded once per process."""
    return DocRestAPISettings()


# ── Operation context (per-request) ──────────────────────────────────────


def get_operation_context(request: Request) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    state = request.app.state
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(
        store=state.store,
        registry=state.registry,
        policy=state.policy,
        request_id=request_id,
        caller="api",
    )


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[DocRestAPISettings, Depends(get_settings)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
