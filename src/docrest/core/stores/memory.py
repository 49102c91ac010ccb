"""
In-memory document store with per-attribute equality indexes.

Nothing is persisted; the store is meant for tests and throwaway
deployments (``DOCREST_DATABASE_URL=memory://``).
"""

from __future__ import annotations

import copy
import threading
from collections import defaultdict
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from typing import Any

from docrest.core.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    PositionNotFoundError,
    QueryError,
)
from docrest.core.protocols import Query, QuerySpec

_MISSING = object()


def _extract(doc: dict[str, Any], path: Sequence[str]) -> Any:
    value: Any = doc
    for part in path:
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _index_key(value: Any) -> Hashable | None:
    # True == 1 in Python; keep booleans apart from numbers.
    if not isinstance(value, Hashable):
        return None
    return (isinstance(value, bool), value)


class _EqualityIndex:
    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path
        # value key -> positions
        self._entries: dict[Hashable, set[int]] = defaultdict(set)

    def add(self, doc: dict[str, Any], position: int) -> None:
        value = _extract(doc, self.path)
        if value is _MISSING:
            return
        key = _index_key(value)
        if key is not None:
            self._entries[key].add(position)

    def remove(self, doc: dict[str, Any], position: int) -> None:
        value = _extract(doc, self.path)
        if value is _MISSING:
            return
        key = _index_key(value)
        if key is None:
            return
        positions = self._entries.get(key)
        if positions is not None:
            positions.discard(position)
            if not positions:
                del self._entries[key]

    def lookup(self, value: Any) -> set[int]:
        key = _index_key(value)
        if key is None:
            return set()
        return set(self._entries.get(key, ()))


@dataclass
class _Collection:
    docs: dict[int, dict[str, Any]] = field(default_factory=dict)
    indexes: dict[tuple[str, ...], _EqualityIndex] = field(default_factory=dict)
    next_position: int = 1


class MemoryDocumentStore:
    """
    Dict-backed implementation of :class:`~docrest.core.protocols.DocumentStore`.
    """

    def __init__(self) -> None:
        self._collections: dict[str, _Collection] = {}
        self._lock = threading.RLock()

    def collection_names(self) -> list[str]:
        with self._lock:
            return sorted(self._collections)

    def create_collection(self, name: str) -> None:
        with self._lock:
            if name in self._collections:
                raise CollectionExistsError(f"collection '{name}' already exists").with_context(
                    collection=name
                )
            self._collections[name] = _Collection()

    def create_index(self, collection: str, path: Sequence[str]) -> None:
        key = tuple(path)
        with self._lock:
            coll = self._use(collection)
            if key in coll.indexes:
                return
            index = _EqualityIndex(key)
            for position, doc in coll.docs.items():
                index.add(doc, position)
            coll.indexes[key] = index

    def indexes(self, collection: str) -> list[tuple[str, ...]]:
        with self._lock:
            return sorted(self._use(collection).indexes)

    def insert(self, collection: str, doc: dict[str, Any]) -> int:
        with self._lock:
            coll = self._use(collection)
            position = coll.next_position
            coll.next_position += 1
            stored = copy.deepcopy(doc)
            coll.docs[position] = stored
            for index in coll.indexes.values():
                index.add(stored, position)
            return position

    def read(self, collection: str, position: int) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._get(collection, position))

    def update(self, collection: str, position: int, doc: dict[str, Any]) -> None:
        with self._lock:
            coll = self._use(collection)
            old = self._get(collection, position)
            stored = copy.deepcopy(doc)
            for index in coll.indexes.values():
                index.remove(old, position)
                index.add(stored, position)
            coll.docs[position] = stored

    def delete(self, collection: str, position: int) -> None:
        with self._lock:
            coll = self._use(collection)
            old = self._get(collection, position)
            for index in coll.indexes.values():
                index.remove(old, position)
            del coll.docs[position]

    def evaluate_query(self, collection: str, query: QuerySpec) -> set[int]:
        with self._lock:
            coll = self._use(collection)
            if not isinstance(query, Query):
                return set(coll.docs)
            index = coll.indexes.get(query.path)
            if index is None:
                raise QueryError(
                    f"please index '{query.attribute}' and retry the query"
                ).with_context(collection=collection)
            positions = index.lookup(query.value)
            if query.limit is not None:
                positions = set(sorted(positions)[: query.limit])
            return positions

    def close(self) -> None:
        with self._lock:
            self._collections.clear()

    # --- internal helpers -------------------------------------------------

    def _use(self, collection: str) -> _Collection:
        coll = self._collections.get(collection)
        if coll is None:
            raise CollectionNotFoundError(f"collection '{collection}' does not exist").with_context(
                collection=collection
            )
        return coll

    def _get(self, collection: str, position: int) -> dict[str, Any]:
        doc = self._use(collection).docs.get(position)
        if doc is None:
            raise PositionNotFoundError(
                f"no document at position {position}"
            ).with_context(collection=collection, position=position)
        return doc
