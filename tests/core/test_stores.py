"""
Tests for the document store backends.

Every test in this module runs against both the in-memory store and the
SQLite store via the parametrised ``store`` fixture.
"""

from __future__ import annotations

import pytest

from docrest.core.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    PositionNotFoundError,
    QueryError,
    StorageError,
)
from docrest.core.protocols import ALL, DocumentStore, Query


@pytest.fixture()
def books(store):
    store.create_collection("books")
    store.create_index("books", ["id"])
    return store


class TestCollections:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, DocumentStore)

    def test_create_and_list(self, store):
        store.create_collection("books")
        store.create_collection("authors")
        assert store.collection_names() == ["authors", "books"]

    def test_duplicate_collection_rejected(self, store):
        store.create_collection("books")
        with pytest.raises(CollectionExistsError):
            store.create_collection("books")

    def test_names_are_case_sensitive(self, store):
        store.create_collection("books")
        store.create_collection("Books")
        assert sorted(store.collection_names()) == ["Books", "books"]

    def test_unknown_collection(self, store):
        with pytest.raises(CollectionNotFoundError):
            store.insert("missing", {"a": 1})
        assert issubclass(CollectionNotFoundError, StorageError)


class TestIndexes:
    def test_create_index_is_idempotent(self, books):
        books.create_index("books", ["id"])
        assert books.indexes("books") == [("id",)]

    def test_index_covers_existing_documents(self, store):
        store.create_collection("books")
        pos = store.insert("books", {"id": "abc"})
        store.create_index("books", ["id"])
        assert store.evaluate_query("books", Query("id", "abc")) == {pos}

    def test_unindexed_query_rejected(self, books):
        books.insert("books", {"id": "a", "name": "x"})
        with pytest.raises(QueryError, match="please index 'name'"):
            books.evaluate_query("books", Query("name", "x"))

    def test_nested_attribute(self, store):
        store.create_collection("books")
        store.create_index("books", ["author", "name"])
        pos = store.insert("books", {"author": {"name": "Le Guin"}})
        store.insert("books", {"author": {"name": "Tolkien"}})
        assert store.evaluate_query("books", Query("author.name", "Le Guin")) == {pos}


class TestDocuments:
    def test_insert_read_roundtrip(self, books):
        doc = {"id": "a", "name": "book1", "tags": ["x", "y"], "meta": {"pages": 10}}
        pos = books.insert("books", doc)
        assert books.read("books", pos) == doc

    def test_positions_increase_and_are_not_reused(self, books):
        first = books.insert("books", {"id": "a"})
        second = books.insert("books", {"id": "b"})
        assert second > first
        books.delete("books", second)
        third = books.insert("books", {"id": "c"})
        assert third > second

    def test_read_returns_a_copy(self, books):
        pos = books.insert("books", {"id": "a", "tags": ["x"]})
        books.read("books", pos)["tags"].append("mutated")
        assert books.read("books", pos)["tags"] == ["x"]

    def test_read_missing_position(self, books):
        with pytest.raises(PositionNotFoundError):
            books.read("books", 42)

    def test_update_replaces_and_reindexes(self, books):
        pos = books.insert("books", {"id": "old", "year": 2000})
        books.update("books", pos, {"id": "new"})
        assert books.read("books", pos) == {"id": "new"}
        assert books.evaluate_query("books", Query("id", "old")) == set()
        assert books.evaluate_query("books", Query("id", "new")) == {pos}

    def test_update_missing_position(self, books):
        with pytest.raises(PositionNotFoundError):
            books.update("books", 42, {"id": "x"})

    def test_delete(self, books):
        pos = books.insert("books", {"id": "a"})
        books.delete("books", pos)
        with pytest.raises(PositionNotFoundError):
            books.read("books", pos)
        assert books.evaluate_query("books", Query("id", "a")) == set()

    def test_delete_missing_position(self, books):
        with pytest.raises(PositionNotFoundError):
            books.delete("books", 42)


class TestEvaluateQuery:
    def test_all_documents(self, books):
        positions = {books.insert("books", {"id": str(i)}) for i in range(3)}
        assert books.evaluate_query("books", ALL) == positions

    def test_all_on_empty_collection(self, books):
        assert books.evaluate_query("books", ALL) == set()

    def test_equality_match(self, books):
        books.insert("books", {"id": "a"})
        pos = books.insert("books", {"id": "b"})
        assert books.evaluate_query("books", Query("id", "b")) == {pos}

    def test_no_match(self, books):
        books.insert("books", {"id": "a"})
        assert books.evaluate_query("books", Query("id", "zzz")) == set()

    def test_limit_keeps_lowest_positions(self, books):
        first = books.insert("books", {"id": "dup"})
        books.insert("books", {"id": "dup"})
        assert books.evaluate_query("books", Query("id", "dup", limit=1)) == {first}

    def test_booleans_do_not_match_numbers(self, store):
        store.create_collection("flags")
        store.create_index("flags", ["v"])
        one = store.insert("flags", {"v": 1})
        true = store.insert("flags", {"v": True})
        assert store.evaluate_query("flags", Query("v", 1)) == {one}
        assert store.evaluate_query("flags", Query("v", True)) == {true}

    def test_null_value(self, store):
        store.create_collection("things")
        store.create_index("things", ["v"])
        null = store.insert("things", {"v": None})
        store.insert("things", {"other": 1})
        assert store.evaluate_query("things", Query("v", None)) == {null}


class TestSqlitePersistence:
    def test_reopen_keeps_documents_and_indexes(self, tmp_path):
        from docrest.core.stores import SqliteDocumentStore

        path = tmp_path / "nested" / "docrest.db"
        first = SqliteDocumentStore(path)
        first.create_collection("books")
        first.create_index("books", ["id"])
        pos = first.insert("books", {"id": "a", "name": "book1"})
        first.close()

        second = SqliteDocumentStore(path)
        try:
            assert second.collection_names() == ["books"]
            assert second.indexes("books") == [("id",)]
            assert second.evaluate_query("books", Query("id", "a")) == {pos}
        finally:
            second.close()
