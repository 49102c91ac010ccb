"""
API-specific settings.

Extends :class:`~docrest.core.settings.DocRestSettings` with parameters
that govern the HTTP transport (bind address, CORS, OpenAPI metadata).

All values can be overridden via environment variables prefixed with
``DOCREST_`` (e.g. ``DOCREST_PORT=9000``).
"""

from __future__ import annotations

from pydantic import Field

from docrest.core.settings import DocRestSettings


class DocRestAPISettings(DocRestSettings):
    """Settings for the docrest HTTP API.

    Order of precedence (highest → lowest):
        1. Environment variables (``DOCREST_PORT``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8888, description="Bind port")

    # ── API ──────────────────────────────────────────────────────────────
    api_title: str = Field(default="docrest", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")
    slow_request_ms: float = Field(
        default=1000.0, ge=0, description="Requests at or above this duration are logged"
    )

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")
