"""
Health router -- liveness and store reachability for container checks.

Endpoints:
    GET /health    200 when the store answers, 503 otherwise
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from docrest.api.deps import Settings
from docrest.core.errors import StorageError
from docrest.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health(request: Request, settings: Settings):
    store = request.app.state.store
    try:
        count = len(store.collection_names())
    except StorageError as exc:
        logger.warning("health_check_failed", error=str(exc))
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": "docrest", "error": exc.message},
        )
    return {
        "status": "healthy",
        "service": "docrest",
        "version": settings.api_version,
        "identifier_policy": settings.identifier_policy,
        "collections": count,
    }
