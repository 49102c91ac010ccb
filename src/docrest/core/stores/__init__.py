"""Document store backends and the URL-based factory.

``open_store()`` is the canonical way to obtain a
:class:`~docrest.core.protocols.DocumentStore`:

- ``"memory://"`` or ``"memory"`` -- :class:`MemoryDocumentStore`
- ``"sqlite:///path/to/file.db"`` -- :class:`SqliteDocumentStore`
- ``"sqlite:///:memory:"`` -- SQLite without a file
- ``"path/to/file.db"`` -- bare path, treated as SQLite
"""

from __future__ import annotations

from docrest.core.protocols import DocumentStore
from docrest.core.stores.memory import MemoryDocumentStore
from docrest.core.stores.sqlite import SqliteDocumentStore


def _parse_url(url: str) -> tuple[str, str]:
    """Parse a store URL into ``(scheme, target)``."""
    if url in ("memory", "memory://"):
        return "memory", ""

    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            path = url[len(prefix):]
            return "sqlite", path or ":memory:"

    if "://" in url:
        raise ValueError(f"unsupported store URL: {url}")

    return "sqlite", url


def open_store(url: str, *, timeout: float = 5.0) -> DocumentStore:
    """Open the document store named by ``url``."""
    scheme, target = _parse_url(url)
    if scheme == "memory":
        return MemoryDocumentStore()
    return SqliteDocumentStore(target, timeout=timeout)


__all__ = ["MemoryDocumentStore", "SqliteDocumentStore", "open_store"]
