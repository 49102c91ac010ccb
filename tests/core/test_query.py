"""Tests for the query translator."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from docrest.core.errors import ReadError, SearchNotImplementedError, StorageError
from docrest.core.protocols import Query
from docrest.core.query import QueryTranslator


@pytest.fixture()
def translator(registry, store):
    registry.ensure("books")
    return QueryTranslator(store)


class TestQueryTranslator:
    def test_all_in_position_order(self, translator, store):
        for name in ("a", "b", "c"):
            store.insert("books", {"id": name})
        assert [d["id"] for d in translator.all("books")] == ["a", "b", "c"]

    def test_by_identifier(self, translator, store):
        store.insert("books", {"id": "a", "name": "book1"})
        assert translator.by_identifier("books", "a") == [{"id": "a", "name": "book1"}]
        assert translator.by_identifier("books", "b") == []

    def test_by_position(self, translator, store):
        pos = store.insert("books", {"id": "a"})
        assert translator.by_position("books", pos) == [{"id": "a"}]
        assert translator.by_position("books", pos + 100) == []

    def test_locate(self, translator, store):
        pos = store.insert("books", {"id": "a"})
        assert translator.locate("books", "a") == pos
        assert translator.locate("books", "zzz") is None

    def test_read_failure_is_not_partial(self, translator, store):
        store.insert("books", {"id": "a"})
        store.insert("books", {"id": "b"})
        with patch.object(store, "read", side_effect=StorageError("corrupt row")):
            with pytest.raises(ReadError, match="could not read document"):
                translator.all("books")

    def test_search_not_implemented(self, translator):
        with pytest.raises(SearchNotImplementedError):
            translator.search("books", Query("name", "book1"))
