"""
Query translation: attribute predicates → positions → documents.

The translator builds :class:`~docrest.core.protocols.Query` values,
evaluates them through the store's index and dereferences every matched
position.  It never decides what "nothing found" means; callers turn an
empty result into a not-found outcome.
"""

from __future__ import annotations

from docrest.core.documents import ID_FIELD, Document
from docrest.core.errors import PositionNotFoundError, ReadError, SearchNotImplementedError, StorageError
from docrest.core.protocols import ALL, DocumentStore, Query


class QueryTranslator:
    """Evaluate identifier and wildcard queries against a store."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def all(self, collection: str) -> list[Document]:
        """Every document of ``collection``, in position order.

        Raises:
            ReadError: if any matched position cannot be read; partial
                results are never returned.
        """
        positions = self.store.evaluate_query(collection, ALL)
        return self._dereference(collection, positions)

    def by_identifier(self, collection: str, value: str) -> list[Document]:
        """Documents whose ``id`` equals ``value`` (zero or one).

        If the index holds several hits the store's choice under
        ``limit=1`` is returned; which one is unspecified.
        """
        positions = self.store.evaluate_query(collection, Query(ID_FIELD, value, limit=1))
        return self._dereference(collection, positions)

    def by_position(self, collection: str, position: int) -> list[Document]:
        try:
            return [self.store.read(collection, position)]
        except PositionNotFoundError:
            return []

    def locate(self, collection: str, value: str) -> int | None:
        """Storage position behind an identifier, or ``None``."""
        positions = self.store.evaluate_query(collection, Query(ID_FIELD, value, limit=1))
        return min(positions) if positions else None

    def search(self, collection: str, query: Query) -> list[Document]:
        """Documents matching an arbitrary attribute predicate.

        Extension point: only identifier lookups are supported today.
        """
        raise SearchNotImplementedError(
            f"search on '{query.attribute}' is not implemented"
        ).with_context(collection=collection)

    def _dereference(self, collection: str, positions: set[int]) -> list[Document]:
        docs: list[Document] = []
        for position in sorted(positions):
            try:
                docs.append(self.store.read(collection, position))
            except StorageError as exc:
                raise ReadError(
                    f"could not read document at position {position}: {exc.message}",
                    cause=exc,
                ).with_context(collection=collection, position=position) from exc
        return docs
