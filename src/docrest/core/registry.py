"""
Collection registry: idempotent collection lifecycle.

``ensure(name)`` makes sure a collection *and* its identifier index exist
before any document is written.  The registry is an explicit object owned
by the application (created once at startup); it is never a module-level
singleton.

Manifesto:
    A collection without its ``id`` index is a broken collection: every
    identifier lookup assumes the index.  Creation and indexing are
    therefore one logical unit, and a failure between the two steps is
    fatal rather than silently tolerated.

Concurrency:
    The check-then-create sequence is serialised with one lock per
    collection name, so two first uses of the same new name in this
    process cannot race.  A ``CollectionExistsError`` raised by a creator
    in another process is treated as "already present".

Examples:
    >>> from docrest.core.stores import MemoryDocumentStore
    >>> registry = CollectionRegistry(MemoryDocumentStore())
    >>> registry.ensure("books")
    Collection(name='books', identifier_indexed=True)
    >>> registry.ensure_all(["books", "authors", "books"]).created
    ['authors']

Tags:
    collections, registry, bootstrap, manifest, index, docrest
"""

from __future__ import annotations

import re
import threading
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from docrest.core.documents import ID_FIELD
from docrest.core.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    IndexCreationError,
    InvalidCollectionNameError,
    ManifestError,
    StorageError,
)
from docrest.core.logging import LogContext, get_logger
from docrest.core.protocols import DocumentStore

logger = get_logger(__name__)

COLLECTION_NAME_RE = re.compile(r"^[A-Za-z]+$")
IDENTIFIER_INDEX: tuple[str, ...] = (ID_FIELD,)


@dataclass(frozen=True, slots=True)
class Collection:
    """A named, independently indexed container of documents."""

    name: str
    identifier_indexed: bool


@dataclass
class BootstrapReport:
    """Outcome of :meth:`CollectionRegistry.ensure_all`."""

    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)


def validate_collection_name(name: str) -> str:
    """Return ``name`` if it is a non-empty alphabetic string."""
    if not COLLECTION_NAME_RE.match(name):
        raise InvalidCollectionNameError(name)
    return name


def read_manifest(path: str | Path) -> list[str]:
    """Read a collection manifest: one name per line, whitespace trimmed.

    Blank lines are dropped here; name validation happens in ``ensure``.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"could not read collection manifest {path}: {exc}", cause=exc) from exc
    return [line.strip() for line in text.splitlines() if line.strip()]


class CollectionRegistry:
    """Ensures collections exist, with their identifier index, before use."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._known: dict[str, Collection] = {}
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def ensure(self, name: str) -> Collection:
        """Return the collection ``name``, creating it and its index if needed.

        Raises:
            InvalidCollectionNameError: name is empty or not alphabetic.
            IndexCreationError: the collection was created but indexing failed.
            StorageError: the store failed to enumerate or create.
        """
        validate_collection_name(name)
        known = self._known.get(name)
        if known is not None:
            return known

        with self._lock_for(name):
            known = self._known.get(name)
            if known is not None:
                return known

            if name in self.store.collection_names():
                collection = self._verify_index(name)
            else:
                collection = self._create(name)
            self._known[name] = collection
            return collection

    def require(self, name: str) -> Collection:
        """Return the existing collection ``name`` without creating it.

        Raises:
            InvalidCollectionNameError: name is empty or not alphabetic.
            CollectionNotFoundError: the store has no such collection.
        """
        validate_collection_name(name)
        known = self._known.get(name)
        if known is not None:
            return known
        if name not in self.store.collection_names():
            raise CollectionNotFoundError(f"collection '{name}' does not exist").with_context(
                collection=name
            )
        return self.ensure(name)

    def ensure_all(self, names: Iterable[str]) -> BootstrapReport:
        """Ensure every name in ``names``; the first failure aborts."""
        report = BootstrapReport()
        seen: set[str] = set()
        present = set(self.store.collection_names())
        logger.info("current_collections", collections=sorted(present))

        for raw in names:
            name = raw.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            with LogContext(collection=name):
                if name in present:
                    self.ensure(name)
                    report.existing.append(name)
                    logger.info("collection_skipped", reason="already exists")
                else:
                    self.ensure(name)
                    report.created.append(name)
        return report

    def bootstrap(self, manifest_path: str | Path) -> BootstrapReport:
        """Create every collection listed in a manifest file."""
        logger.info("bootstrap_started", manifest=str(manifest_path))
        report = self.ensure_all(read_manifest(manifest_path))
        logger.info("bootstrap_finished", created=report.created, existing=report.existing)
        return report

    def collections(self) -> list[Collection]:
        """Every collection in the store, with its index status."""
        return [
            Collection(name=name, identifier_indexed=IDENTIFIER_INDEX in self.store.indexes(name))
            for name in self.store.collection_names()
        ]

    # --- internal helpers -------------------------------------------------

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[name]

    def _create(self, name: str) -> Collection:
        try:
            self.store.create_collection(name)
        except CollectionExistsError:
            # Created concurrently by another process sharing the store.
            return self._verify_index(name)

        try:
            self.store.create_index(name, IDENTIFIER_INDEX)
        except StorageError as exc:
            logger.error("index_creation_failed", collection=name, error=str(exc))
            raise IndexCreationError(
                f"collection '{name}' was created but its id index was not: {exc.message}",
                cause=exc,
            ).with_context(collection=name) from exc

        logger.info("collection_created", collection=name)
        return Collection(name=name, identifier_indexed=True)

    def _verify_index(self, name: str) -> Collection:
        if IDENTIFIER_INDEX in self.store.indexes(name):
            return Collection(name=name, identifier_indexed=True)

        logger.warning("collection_index_missing", collection=name)
        try:
            self.store.create_index(name, IDENTIFIER_INDEX)
        except StorageError as exc:
            raise IndexCreationError(
                f"could not repair id index of collection '{name}': {exc.message}",
                cause=exc,
            ).with_context(collection=name) from exc
        return Collection(name=name, identifier_indexed=True)
