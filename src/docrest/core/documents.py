"""
Document validation and normalization helpers.

Documents are schema-less: the only structural requirement is a JSON
object with string keys whose values are JSON-compatible.
"""

from __future__ import annotations

import copy
import math
from typing import Any

from docrest.core.errors import InvalidDocumentError

ID_FIELD = "id"

JSONValue = None | bool | int | float | str | list[Any] | dict[str, Any]
Document = dict[str, Any]


def normalize_document(doc: object) -> Document:
    """
    Check that ``doc`` is a JSON object and return a deep copy of it.

    Raises:
        InvalidDocumentError: for non-mapping bodies, non-string keys or
            values JSON cannot represent (sets, NaN, arbitrary objects).
    """
    if not isinstance(doc, dict):
        raise InvalidDocumentError("document must be a JSON object")

    _check_value(doc, path="")
    return copy.deepcopy(doc)


def without_identifier(doc: Document) -> Document:
    """Return a shallow copy of ``doc`` with any ``id`` attribute removed."""
    return {k: v for k, v in doc.items() if k != ID_FIELD}


def _check_value(value: object, path: str) -> None:
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise InvalidDocumentError(f"non-finite number at '{path or '$'}'")
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_value(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidDocumentError("document keys must be strings")
            _check_value(item, f"{path}.{key}" if path else key)
        return
    raise InvalidDocumentError(
        f"unsupported value of type {type(value).__name__} at '{path or '$'}'"
    )
