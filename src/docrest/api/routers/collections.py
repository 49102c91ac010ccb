"""
Collections router -- read-only view of the collection catalog.

Endpoints:
    GET /collections    Every collection with its id-index status
"""

from __future__ import annotations

from fastapi import APIRouter

from docrest.api.deps import OpContext
from docrest.api.utils import _handle_error

router = APIRouter(prefix="/collections")


@router.get("")
def list_collections(ctx: OpContext):
    """List collections as ``{"results": [{"name": ..., "identifier_indexed": ...}]}``."""
    from docrest.ops.collections import list_collections as _list

    result = _list(ctx)
    if not result.success:
        return _handle_error(result)
    return {"results": result.data}
