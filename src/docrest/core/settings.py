"""Base settings shared by the API server and the CLI.

``DocRestSettings`` holds everything the core needs to start: where the
document store lives, which identifier policy assigns ``id`` values, and
which collection manifest (if any) is bootstrapped on startup.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not runtime
    - **Environment-driven:** Reads ``DOCREST_*`` env vars and a ``.env`` file
    - **Sensible defaults:** Works out of the box for development

Examples:
    >>> from docrest.core.settings import DocRestSettings
    >>> settings = DocRestSettings(identifier_policy="positional")
    >>> settings.identifier_policy
    'positional'

Tags:
    settings, configuration, pydantic, environment, docrest
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocRestSettings(BaseSettings):
    """Common settings for every docrest entry point.

    Fields
    ──────
    debug              : Enable debug mode (error details in 500 bodies)
    log_level          : Structlog log level
    log_json           : JSON log output; ``None`` auto-detects from the TTY
    database_url       : Store URL (``sqlite:///path`` or ``memory://``)
    store_timeout      : Seconds a store call waits on a locked database
    manifest_path      : Collection manifest bootstrapped on startup
    identifier_policy  : ``token`` or ``positional``
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCREST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///storage/docrest.db",
        description="Document store URL",
    )
    store_timeout: float = Field(default=5.0, gt=0, description="Store lock wait in seconds")

    # ── Collections ──────────────────────────────────────────────
    manifest_path: str | None = Field(
        default=None,
        description="Flat file with one collection name per line",
    )
    identifier_policy: Literal["token", "positional"] = Field(
        default="token",
        description="How document identifiers are assigned",
    )
