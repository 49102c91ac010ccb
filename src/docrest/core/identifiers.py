"""
Document identifier policies.

Every document carries an external ``id`` that never changes.  How that
value is assigned is a per-deployment choice, modelled as a single
:class:`IdentifierPolicy` capability with two variants:

``TokenPolicy``
    A short URL-safe token is generated *before* insert and stored in the
    document.  Lookups go through the ``id`` index, so the identifier is
    fully decoupled from the storage position.

``PositionalPolicy``
    The store's own position becomes the identifier.  It is only known
    after insert, so the stringified position is written back into the
    document with an explicit update.  Lookups read the position directly.

Manifesto:
    The CRUD operations are written once against ``IdentifierPolicy``;
    switching policy never touches ``docrest.ops``.  Policies must not be
    mixed within one collection's lifetime.

Token layout::

    <time since 2016-01-01 in ms><worker><counter><random x2>

    Every part is encoded in a 64-symbol alphabet (0-9 a-z A-Z _ -).
    The time part is 7 symbols for well over a century, the counter
    disambiguates tokens created within the same millisecond and the
    worker symbol separates processes sharing a store.

Tags:
    identifiers, tokens, policy, docrest
"""

from __future__ import annotations

import re
import secrets
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Final

from docrest.core.documents import ID_FIELD, Document, without_identifier
from docrest.core.errors import (
    IdentifierGenerationError,
    InvalidIdentifierError,
    PositionNotFoundError,
    StorageError,
)
from docrest.core.logging import get_logger
from docrest.core.protocols import DocumentStore
from docrest.core.query import QueryTranslator

logger = get_logger(__name__)

ALPHABET: Final = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_-"
_BASE: Final = len(ALPHABET)
# 2016-01-01T00:00:00Z
_EPOCH_MS: Final = 1451606400000
_TOKEN_RE: Final = re.compile(r"^[0-9A-Za-z_-]{1,64}$")
_POSITION_RE: Final = re.compile(r"^[0-9]{1,18}$")


def _encode(value: int) -> str:
    """Encode a non-negative integer in the 64-symbol alphabet."""
    if value == 0:
        return ALPHABET[0]
    chars = []
    while value:
        value, rem = divmod(value, _BASE)
        chars.append(ALPHABET[rem])
    return "".join(reversed(chars))


class TokenGenerator:
    """Thread-safe generator of short, practically unique string tokens.

    Args:
        worker: Symbol index (0-63) identifying this process; random when omitted.
        clock: Millisecond clock, injectable for tests.
    """

    def __init__(self, worker: int | None = None, clock: Any = None) -> None:
        if worker is None:
            worker = secrets.randbelow(_BASE)
        if not 0 <= worker < _BASE:
            raise ValueError(f"worker must be in [0, {_BASE})")
        self.worker = worker
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.Lock()
        self._last_ms = -1
        self._counter = 0

    def generate(self) -> str:
        try:
            with self._lock:
                now = self._clock() - _EPOCH_MS
                if now < 0:
                    raise IdentifierGenerationError("system clock is before the token epoch")
                if now <= self._last_ms:
                    # Same millisecond, or the clock stepped backwards.
                    self._counter += 1
                    now = self._last_ms
                else:
                    self._counter = 0
                    self._last_ms = now
                counter = self._counter
            suffix = "".join(secrets.choice(ALPHABET) for _ in range(2))
        except (OSError, NotImplementedError) as exc:
            raise IdentifierGenerationError("randomness source failed", cause=exc) from exc
        return _encode(now) + ALPHABET[self.worker] + _encode(counter) + suffix


class IdentifierPolicy(ABC):
    """How external identifiers are assigned, parsed and resolved."""

    name: str

    @abstractmethod
    def parse(self, raw: str) -> str:
        """Validate a raw path identifier; raise ``InvalidIdentifierError``."""

    @abstractmethod
    def before_insert(self, doc: Document) -> Document:
        """Return the document to insert (client ``id`` never survives)."""

    @abstractmethod
    def after_insert(
        self, store: DocumentStore, collection: str, position: int, doc: Document
    ) -> Document:
        """Finish identifier assignment once the position is known."""

    @abstractmethod
    def fetch(self, translator: QueryTranslator, collection: str, identifier: str) -> list[Document]:
        """Documents stored under ``identifier`` (at most one)."""

    @abstractmethod
    def resolve(self, translator: QueryTranslator, collection: str, identifier: str) -> int | None:
        """Storage position of ``identifier`` or ``None``."""


class TokenPolicy(IdentifierPolicy):
    """Generated tokens stored as an indexed document attribute."""

    name = "token"

    def __init__(self, generator: TokenGenerator | None = None) -> None:
        self.generator = generator or TokenGenerator()

    def parse(self, raw: str) -> str:
        if not _TOKEN_RE.match(raw):
            raise InvalidIdentifierError(f"'{raw}' is not a valid document id").with_context(
                identifier=raw
            )
        return raw

    def before_insert(self, doc: Document) -> Document:
        token = self.generator.generate()
        prepared = without_identifier(doc)
        prepared[ID_FIELD] = token
        return prepared

    def after_insert(
        self, store: DocumentStore, collection: str, position: int, doc: Document
    ) -> Document:
        return doc

    def fetch(self, translator: QueryTranslator, collection: str, identifier: str) -> list[Document]:
        return translator.by_identifier(collection, identifier)

    def resolve(self, translator: QueryTranslator, collection: str, identifier: str) -> int | None:
        return translator.locate(collection, identifier)


class PositionalPolicy(IdentifierPolicy):
    """The store position, stringified and written back into the document."""

    name = "positional"

    def parse(self, raw: str) -> str:
        if not _POSITION_RE.match(raw):
            raise InvalidIdentifierError("id cannot be parsed to number").with_context(
                identifier=raw
            )
        return str(int(raw))

    def before_insert(self, doc: Document) -> Document:
        return without_identifier(doc)

    def after_insert(
        self, store: DocumentStore, collection: str, position: int, doc: Document
    ) -> Document:
        written = dict(doc)
        written[ID_FIELD] = str(position)
        try:
            store.update(collection, position, written)
        except StorageError as exc:
            # The insert already happened: the document exists without its id.
            logger.error(
                "orphaned_document",
                collection=collection,
                position=position,
                error=str(exc),
            )
            raise StorageError(
                f"could not add id to document: {exc.message}", cause=exc
            ).with_context(collection=collection, position=position) from exc
        return written

    def fetch(self, translator: QueryTranslator, collection: str, identifier: str) -> list[Document]:
        return translator.by_position(collection, int(identifier))

    def resolve(self, translator: QueryTranslator, collection: str, identifier: str) -> int | None:
        position = int(identifier)
        try:
            translator.store.read(collection, position)
        except PositionNotFoundError:
            return None
        return position


def make_policy(name: str) -> IdentifierPolicy:
    """Build the policy configured by ``DOCREST_IDENTIFIER_POLICY``."""
    if name == TokenPolicy.name:
        return TokenPolicy()
    if name == PositionalPolicy.name:
        return PositionalPolicy()
    raise ValueError(f"unknown identifier policy: {name}")


__all__ = [
    "ALPHABET",
    "IdentifierPolicy",
    "PositionalPolicy",
    "TokenGenerator",
    "TokenPolicy",
    "make_policy",
]
