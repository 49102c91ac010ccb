"""
Documents router -- CRUD over collection documents.

Endpoints:
    POST   /db/{collection}             Create a document (201)
    GET    /db/{collection}             List every document
    GET    /db/{collection}/{id}        Read one document
    PUT    /db/{collection}/{id}        Replace one document
    DELETE /db/{collection}/{id}        Delete one document
    POST   /db/search/{collection}      Attribute search (not implemented yet)

Collections are created on first use.  Error bodies are ``{"error": ...}``
with the status mapped in :mod:`docrest.api.middleware.errors`.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Path

from docrest.api.deps import OpContext
from docrest.api.utils import _handle_error

router = APIRouter(prefix="/db")

CollectionName = Annotated[str, Path(description="Alphabetic collection name")]
DocumentId = Annotated[str, Path(description="External document identifier")]
JsonObject = Annotated[dict[str, Any], Body(description="Document body (JSON object)")]


@router.post("/search/{collection}")
def search_documents(collection: CollectionName, query: JsonObject, ctx: OpContext):
    """Documents matching ``{"attribute": ..., "value": ..., "limit": ...}``.

    The query is validated (400 on a malformed query) and then answered
    with 501 until attribute search is supported.
    """
    from docrest.ops.documents import search_documents as _search
    from docrest.ops.requests import SearchDocumentsRequest

    result = _search(ctx, SearchDocumentsRequest(collection=collection, query=query))
    if not result.success:
        return _handle_error(result)
    return {"results": result.data}


@router.post("/{collection}", status_code=201)
def create_document(collection: CollectionName, body: JsonObject, ctx: OpContext):
    """Insert a document; the response carries the assigned ``id``.

    Example:
        POST /db/books  {"name": "book1"}

        Response (201):
        {"name": "book1", "id": "4fT9kQ2a7xY"}
    """
    from docrest.ops.documents import create_document as _create
    from docrest.ops.requests import CreateDocumentRequest

    result = _create(ctx, CreateDocumentRequest(collection=collection, body=body))
    if not result.success:
        return _handle_error(result)
    return result.data


@router.get("/{collection}")
def list_documents(collection: CollectionName, ctx: OpContext):
    """Every document of the collection as ``{"results": [...]}``."""
    from docrest.ops.documents import list_documents as _list
    from docrest.ops.requests import ListDocumentsRequest

    result = _list(ctx, ListDocumentsRequest(collection=collection))
    if not result.success:
        return _handle_error(result)
    return {"results": result.data}


@router.get("/{collection}/{document_id}")
def get_document(collection: CollectionName, document_id: DocumentId, ctx: OpContext):
    from docrest.ops.documents import get_document as _get
    from docrest.ops.requests import GetDocumentRequest

    result = _get(ctx, GetDocumentRequest(collection=collection, document_id=document_id))
    if not result.success:
        return _handle_error(result)
    return result.data


@router.put("/{collection}/{document_id}")
def update_document(
    collection: CollectionName,
    document_id: DocumentId,
    body: JsonObject,
    ctx: OpContext,
):
    """Replace a document wholesale; ``id`` in the body is overridden by the path."""
    from docrest.ops.documents import update_document as _update
    from docrest.ops.requests import UpdateDocumentRequest

    result = _update(
        ctx,
        UpdateDocumentRequest(collection=collection, document_id=document_id, body=body),
    )
    if not result.success:
        return _handle_error(result)
    return result.data


@router.delete("/{collection}/{document_id}")
def delete_document(collection: CollectionName, document_id: DocumentId, ctx: OpContext):
    """Delete a document; responds with ``{"id": ...}``."""
    from docrest.ops.documents import delete_document as _delete
    from docrest.ops.requests import DeleteDocumentRequest

    result = _delete(ctx, DeleteDocumentRequest(collection=collection, document_id=document_id))
    if not result.success:
        return _handle_error(result)
    return result.data
