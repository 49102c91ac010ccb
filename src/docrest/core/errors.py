"""
Structured error types for docrest.

Every failure raised by the core layer is a :class:`DocRestError` subclass.
The error carries a category, a retry flag, structured context and an
optional chained cause, so the operations layer can classify it into a
response code without inspecting message strings.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode of the core
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry collection/identifier metadata for logging
    - **Error Chaining:** Preserve the store's original exception as cause

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       DocRestError                               │
        │  (category, retryable, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  InvalidInputError          StorageError                         │
        │  (VALIDATION)               (STORAGE)                            │
        │       │                          │                               │
        │  InvalidCollectionName      CollectionExistsError                │
        │  InvalidIdentifier          CollectionNotFoundError              │
        │  InvalidDocument            PositionNotFoundError                │
        │  InvalidQuery               IndexCreationError                   │
        │                             QueryError                           │
        │                             ReadError                            │
        │                                                                  │
        │  IdentifierGenerationError  ManifestError                        │
        │  (IDENTIFIER)               (CONFIG)                             │
        │                                                                  │
        │  SearchNotImplementedError                                       │
        │  (INTERNAL)                                                      │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidCollectionNameError("books1")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.retryable
    False

    >>> try:
    ...     raise OSError("disk full")
    ... except OSError as e:
    ...     err = StorageError("insert failed", cause=e).with_context(collection="books")
    >>> err.context.collection
    'books'

Tags:
    error-handling, exception-hierarchy, error-context, docrest

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Client-supplied input was malformed
        STORAGE: The document store reported a failure
        IDENTIFIER: Identifier generation failed
        CONFIG: Startup configuration (manifest, settings) was unusable
        INTERNAL: Bugs, unexpected state, unimplemented extension points
    """

    VALIDATION = "VALIDATION"
    STORAGE = "STORAGE"
    IDENTIFIER = "IDENTIFIER"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        collection: Collection the failing operation targeted
        identifier: External document identifier, if any
        position: Storage position, if any
        metadata: Additional key-value pairs
    """

    collection: str | None = None
    identifier: str | None = None
    position: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("collection", "identifier", "position"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocRestError(Exception):
    """
    Base exception for all docrest errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass a message and, when wrapping, the original exception.

    Examples:
        >>> error = DocRestError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = DocRestError("lookup failed").with_context(collection="books", identifier="abc")
        >>> error.to_dict()["context"]
        {'collection': 'books', 'identifier': 'abc'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocRestError:
        """
        Add context to this error (fluent API).

        Usage:
            raise PositionNotFoundError("no document").with_context(
                collection="books", position=7
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# INVALID INPUT (client-caused, never retryable)
# =============================================================================


class InvalidInputError(DocRestError):
    """Malformed request input: body, path identifier, name or query."""

    default_category = ErrorCategory.VALIDATION


class InvalidCollectionNameError(InvalidInputError):
    """Collection name is empty or contains non-alphabetic characters."""

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(
            f"collection name '{name}' has invalid characters (only a-z, A-Z allowed)"
            if name
            else "collection name must not be empty",
            **kwargs,
        )
        self.name = name
        self.context.collection = name


class InvalidIdentifierError(InvalidInputError):
    """A path identifier cannot be parsed by the active identifier policy."""


class InvalidDocumentError(InvalidInputError):
    """Request body is not a JSON object with string keys."""


class InvalidQueryError(InvalidInputError):
    """A search query body is malformed."""


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(DocRestError):
    """The document store failed to create, read, update, delete or evaluate."""

    default_category = ErrorCategory.STORAGE


class CollectionExistsError(StorageError):
    """``create_collection`` was called for a name that already exists."""


class CollectionNotFoundError(StorageError):
    """The collection is not known to the store."""


class PositionNotFoundError(StorageError):
    """No document is stored at the requested position."""


class IndexCreationError(StorageError):
    """The identifier index could not be created for a new collection.

    Fatal: later identifier lookups assume the index exists.
    """


class QueryError(StorageError):
    """Query evaluation failed (e.g. the attribute is not indexed)."""


class ReadError(StorageError):
    """Dereferencing a matched position failed during a search."""


# =============================================================================
# OTHER
# =============================================================================


class IdentifierGenerationError(DocRestError):
    """The token generator could not produce an identifier."""

    default_category = ErrorCategory.IDENTIFIER


class ManifestError(DocRestError):
    """The startup collection manifest is missing or unreadable."""

    default_category = ErrorCategory.CONFIG


class SearchNotImplementedError(DocRestError):
    """Search by arbitrary predicate is a named extension point without an implementation."""


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocRestError",
    "InvalidInputError",
    "InvalidCollectionNameError",
    "InvalidIdentifierError",
    "InvalidDocumentError",
    "InvalidQueryError",
    "StorageError",
    "CollectionExistsError",
    "CollectionNotFoundError",
    "PositionNotFoundError",
    "IndexCreationError",
    "QueryError",
    "ReadError",
    "IdentifierGenerationError",
    "ManifestError",
    "SearchNotImplementedError",
]
