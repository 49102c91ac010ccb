"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Startup opens the document store named by ``database_url``, builds the
collection registry and identifier policy, and, when ``manifest_path`` is
set, creates every collection the manifest lists.  A bootstrap failure
aborts startup: the service never serves requests against a half-created
collection set.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from docrest.api.deps import get_settings
from docrest.api.middleware.errors import (
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from docrest.api.middleware.request_id import RequestIDMiddleware
from docrest.api.middleware.timing import TimingMiddleware
from docrest.api.settings import DocRestAPISettings
from docrest.core.identifiers import make_policy
from docrest.core.logging import configure_logging, get_logger
from docrest.core.registry import CollectionRegistry
from docrest.core.stores import open_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan -- open the store, bootstrap, close on shutdown."""
    settings: DocRestAPISettings = app.state.settings
    log = get_logger("docrest.api")
    log.info("docrest API starting", version=app.version, store=settings.database_url)

    store = open_store(settings.database_url, timeout=settings.store_timeout)
    try:
        registry = CollectionRegistry(store)
        if settings.manifest_path is not None:
            registry.bootstrap(settings.manifest_path)

        app.state.store = store
        app.state.registry = registry
        app.state.policy = make_policy(settings.identifier_policy)
        log.info("docrest API ready", identifier_policy=settings.identifier_policy)

        yield
    finally:
        store.close()
        log.info("docrest API shutting down")


def create_app(
    *,
    settings: DocRestAPISettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : DocRestAPISettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """

    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    # Stash settings on app state for middleware access
    app.state.settings = settings

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware, slow_request_ms=settings.slow_request_ms)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from docrest.api.routers import collections, documents, health

    app.include_router(health.router, tags=["health"])
    app.include_router(collections.router, tags=["collections"])
    app.include_router(documents.router, tags=["documents"])

    return app
