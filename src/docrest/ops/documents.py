"""
Document CRUD operations.

Each function is one synchronous pipeline over the collection registry,
the identifier policy and the query translator.  Operations never raise:
every failure becomes an :class:`OperationResult` carrying one of the
codes listed in :mod:`docrest.ops.result`.

Reading from a collection that does not exist is a ``STORAGE_FAILURE``
and never creates it; every other operation creates the collection on
first use.  A missing identifier is ``NOT_FOUND`` for read, update and
delete alike; deleting the same missing id twice yields the same outcome
twice.
"""

from __future__ import annotations

from typing import Any

from docrest.core.documents import ID_FIELD, Document, normalize_document
from docrest.core.errors import (
    DocRestError,
    IdentifierGenerationError,
    InvalidInputError,
    InvalidQueryError,
    PositionNotFoundError,
    SearchNotImplementedError,
    StorageError,
)
from docrest.core.logging import get_logger
from docrest.core.protocols import Query
from docrest.core.registry import validate_collection_name
from docrest.ops.context import OperationContext
from docrest.ops.requests import (
    CreateDocumentRequest,
    DeleteDocumentRequest,
    GetDocumentRequest,
    ListDocumentsRequest,
    SearchDocumentsRequest,
    UpdateDocumentRequest,
)
from docrest.ops.result import OperationResult, _Timer, start_timer

logger = get_logger(__name__)


def create_document(
    ctx: OperationContext,
    request: CreateDocumentRequest,
) -> OperationResult[Document]:
    """Insert a new document and assign its identifier."""
    timer = start_timer()
    collection = request.collection

    try:
        ctx.registry.ensure(collection)
        body = normalize_document(request.body)
        prepared = ctx.policy.before_insert(body)
        position = ctx.store.insert(collection, prepared)
        created = ctx.policy.after_insert(ctx.store, collection, position, prepared)
    except Exception as exc:
        return _failed(exc, "insert document", collection, timer)

    logger.info(
        "document_created",
        collection=collection,
        id=created[ID_FIELD],
        position=position,
        request_id=ctx.request_id,
    )
    return OperationResult.ok(created, elapsed_ms=timer.elapsed_ms)


def list_documents(
    ctx: OperationContext,
    request: ListDocumentsRequest,
) -> OperationResult[list[Document]]:
    """Every document of a collection."""
    timer = start_timer()

    try:
        ctx.registry.ensure(request.collection)
        docs = ctx.translator.all(request.collection)
    except Exception as exc:
        return _failed(exc, f"read from collection {request.collection}", request.collection, timer)

    return OperationResult.ok(docs, elapsed_ms=timer.elapsed_ms)


def get_document(
    ctx: OperationContext,
    request: GetDocumentRequest,
) -> OperationResult[Document]:
    """Look a document up by its external identifier."""
    timer = start_timer()
    collection = request.collection

    try:
        identifier = ctx.policy.parse(request.document_id)
        ctx.registry.require(collection)
        docs = ctx.policy.fetch(ctx.translator, collection, identifier)
    except Exception as exc:
        return _failed(exc, "read document", collection, timer)

    if not docs:
        return _not_found(collection, request.document_id, timer)
    return OperationResult.ok(docs[0], elapsed_ms=timer.elapsed_ms)


def update_document(
    ctx: OperationContext,
    request: UpdateDocumentRequest,
) -> OperationResult[Document]:
    """Replace a document; the ``id`` always comes from the request path."""
    timer = start_timer()
    collection = request.collection

    try:
        identifier = ctx.policy.parse(request.document_id)
        ctx.registry.ensure(collection)
        body = normalize_document(request.body)
        body[ID_FIELD] = identifier

        position = ctx.policy.resolve(ctx.translator, collection, identifier)
        if position is None:
            return _not_found(collection, identifier, timer)
        ctx.store.update(collection, position, body)
    except Exception as exc:
        return _failed(exc, "update document", collection, timer)

    logger.info("document_updated", collection=collection, id=identifier, position=position)
    return OperationResult.ok(body, elapsed_ms=timer.elapsed_ms)


def delete_document(
    ctx: OperationContext,
    request: DeleteDocumentRequest,
) -> OperationResult[dict[str, str]]:
    """Delete a document by identifier."""
    timer = start_timer()
    collection = request.collection

    try:
        identifier = ctx.policy.parse(request.document_id)
        ctx.registry.ensure(collection)
        position = ctx.policy.resolve(ctx.translator, collection, identifier)
        if position is None:
            return _not_found(collection, identifier, timer)
        ctx.store.delete(collection, position)
    except Exception as exc:
        return _failed(exc, f"delete document with id {request.document_id}", collection, timer)

    logger.info("document_deleted", collection=collection, id=identifier, position=position)
    return OperationResult.ok({ID_FIELD: identifier}, elapsed_ms=timer.elapsed_ms)


def search_documents(
    ctx: OperationContext,
    request: SearchDocumentsRequest,
) -> OperationResult[list[Document]]:
    """Documents matching ``{attribute, value, limit}``.

    Named extension point: the query is validated, then answered with
    ``NOT_IMPLEMENTED``.
    """
    timer = start_timer()

    try:
        validate_collection_name(request.collection)
        query = _parse_query(request.query)
        docs = ctx.translator.search(request.collection, query)
    except Exception as exc:
        return _failed(exc, "search documents", request.collection, timer)

    return OperationResult.ok(docs, elapsed_ms=timer.elapsed_ms)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _parse_query(raw: dict[str, Any]) -> Query:
    attribute = raw.get("attribute")
    if not isinstance(attribute, str) or not attribute:
        raise InvalidQueryError("query needs a non-empty string 'attribute'")
    value = raw.get("value")
    if isinstance(value, (list, dict)):
        raise InvalidQueryError("query 'value' must be a scalar")
    limit = raw.get("limit")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise InvalidQueryError("query 'limit' must be a positive integer")
    return Query(attribute=attribute, value=value, limit=limit)


def _not_found(collection: str, identifier: str, timer: _Timer) -> OperationResult[Any]:
    return OperationResult.fail(
        "NOT_FOUND",
        "document not found",
        details={"collection": collection, "id": identifier},
        elapsed_ms=timer.elapsed_ms,
    )


def _failed(exc: Exception, action: str, collection: str, timer: _Timer) -> OperationResult[Any]:
    """Classify an exception into an error code and log it."""
    if not isinstance(exc, DocRestError):
        logger.exception("op_failed", action=action, collection=collection, error=str(exc))
        return OperationResult.fail(
            "INTERNAL", f"could not {action}: {exc}", elapsed_ms=timer.elapsed_ms
        )

    details = exc.context.to_dict()
    if isinstance(exc, InvalidInputError):
        code, message = "INVALID_INPUT", exc.message
    elif isinstance(exc, PositionNotFoundError):
        code, message = "NOT_FOUND", "document not found"
    elif isinstance(exc, IdentifierGenerationError):
        code, message = "IDENTIFIER_GENERATION_FAILED", f"could not generate id: {exc.message}"
    elif isinstance(exc, SearchNotImplementedError):
        code, message = "NOT_IMPLEMENTED", exc.message
    elif isinstance(exc, StorageError):
        code, message = "STORAGE_FAILURE", f"could not {action}: {exc.message}"
    else:
        code, message = "INTERNAL", f"could not {action}: {exc.message}"

    if code in ("STORAGE_FAILURE", "IDENTIFIER_GENERATION_FAILED", "INTERNAL"):
        logger.error("op_failed", action=action, code=code, **exc.to_dict())
    else:
        logger.info("op_rejected", action=action, code=code, collection=collection, reason=exc.message)

    return OperationResult.fail(
        code,
        message,
        category=exc.category,
        details=details,
        retryable=exc.retryable,
        elapsed_ms=timer.elapsed_ms,
    )
