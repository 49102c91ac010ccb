"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument.  The context carries the long-lived collaborators (document store,
collection registry, identifier policy) plus per-call identity.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from docrest.core.identifiers import IdentifierPolicy
from docrest.core.protocols import DocumentStore
from docrest.core.query import QueryTranslator
from docrest.core.registry import CollectionRegistry


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        store: Document store satisfying :class:`docrest.core.protocols.DocumentStore`.
        registry: Collection registry bound to ``store``.
        policy: Identifier policy of this deployment.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request: ``"api"``, ``"cli"`` or ``"sdk"``.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    store: DocumentStore
    registry: CollectionRegistry
    policy: IdentifierPolicy
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def translator(self) -> QueryTranslator:
        return QueryTranslator(self.store)
