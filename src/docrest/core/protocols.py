"""
Canonical protocol definitions for docrest.

``DocumentStore`` is the whole contract the core needs from an embedded
document storage engine.  Documents are addressed by *position*, an
integer the store assigns on insert; external identifiers are layered on
top by :mod:`docrest.core.identifiers`.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── Query          -- equality predicate {attribute, value, limit}
        ├── ALL            -- wildcard query matching every document
        └── DocumentStore  -- collection/document/index/query facade

    Implementations:
        stores/memory.py, stores/sqlite.py

Guardrails:
    ❌ DON'T: Let store-specific exceptions escape a store method
    ✅ DO: Raise a docrest.core.errors.StorageError subclass

    ❌ DON'T: Silently no-op on a missing position
    ✅ DO: Raise PositionNotFoundError from read/update/delete

Tags:
    protocol, document-store, query, index, docrest, contracts
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Final, Protocol, runtime_checkable

Scalar = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Query:
    """Single equality predicate evaluated against one attribute index.

    Attributes:
        attribute: Dotted attribute path (``"id"``, ``"author.name"``).
        value: Scalar the attribute must equal.
        limit: Maximum number of positions to return; ``None`` is unbounded.
    """

    attribute: str
    value: Scalar
    limit: int | None = None

    @property
    def path(self) -> tuple[str, ...]:
        return tuple(self.attribute.split("."))


class _AllDocuments:
    """The wildcard query."""

    _instance: _AllDocuments | None = None

    def __new__(cls) -> _AllDocuments:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ALL"


ALL: Final = _AllDocuments()

QuerySpec = Query | _AllDocuments


@runtime_checkable
class DocumentStore(Protocol):
    """Embedded document store facade.

    Implementations must be safe to call from several worker threads.
    """

    def collection_names(self) -> list[str]:
        """Names of every collection, sorted."""
        ...

    def create_collection(self, name: str) -> None:
        """Create an empty collection; ``CollectionExistsError`` if present."""
        ...

    def create_index(self, collection: str, path: Sequence[str]) -> None:
        """Create an equality index on an attribute path (idempotent)."""
        ...

    def indexes(self, collection: str) -> list[tuple[str, ...]]:
        """Indexed attribute paths of a collection."""
        ...

    def insert(self, collection: str, doc: dict[str, Any]) -> int:
        """Store a document and return its new position."""
        ...

    def read(self, collection: str, position: int) -> dict[str, Any]:
        """Return the document at ``position``."""
        ...

    def update(self, collection: str, position: int, doc: dict[str, Any]) -> None:
        """Replace the document at ``position``."""
        ...

    def delete(self, collection: str, position: int) -> None:
        """Remove the document at ``position``."""
        ...

    def evaluate_query(self, collection: str, query: QuerySpec) -> set[int]:
        """Positions matching ``query``."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...


__all__ = ["ALL", "DocumentStore", "Query", "QuerySpec", "Scalar"]
