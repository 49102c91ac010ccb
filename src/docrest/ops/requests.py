"""
Typed request objects for operations.

Routers and CLI commands build these from transport input; operation
functions never see HTTP or terminal types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CreateDocumentRequest:
    collection: str
    body: Any


@dataclass(frozen=True)
class ListDocumentsRequest:
    collection: str


@dataclass(frozen=True)
class GetDocumentRequest:
    collection: str
    document_id: str


@dataclass(frozen=True)
class UpdateDocumentRequest:
    collection: str
    document_id: str
    body: Any


@dataclass(frozen=True)
class DeleteDocumentRequest:
    collection: str
    document_id: str


@dataclass(frozen=True)
class SearchDocumentsRequest:
    """Equality predicate ``{attribute, value, limit}`` over one collection."""

    collection: str
    query: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BootstrapRequest:
    manifest_path: str
