"""Tests for the collection registry and manifest bootstrap."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from docrest.core.errors import (
    CollectionNotFoundError,
    IndexCreationError,
    InvalidCollectionNameError,
    ManifestError,
    StorageError,
)
from docrest.core.registry import (
    IDENTIFIER_INDEX,
    Collection,
    CollectionRegistry,
    read_manifest,
    validate_collection_name,
)


class TestValidateName:
    @pytest.mark.parametrize("name", ["books", "Authors", "x"])
    def test_valid(self, name):
        assert validate_collection_name(name) == name

    @pytest.mark.parametrize("name", ["", "books1", "my-books", "my books", "bücher_"])
    def test_invalid(self, name):
        with pytest.raises(InvalidCollectionNameError):
            validate_collection_name(name)


class TestEnsure:
    def test_creates_collection_with_id_index(self, registry, store):
        result = registry.ensure("books")
        assert result == Collection(name="books", identifier_indexed=True)
        assert "books" in store.collection_names()
        assert IDENTIFIER_INDEX in store.indexes("books")

    def test_idempotent(self, registry, store):
        registry.ensure("books")
        registry.ensure("books")
        assert store.collection_names() == ["books"]
        assert store.indexes("books") == [IDENTIFIER_INDEX]

    def test_concurrent_first_use_creates_once(self, registry, store):
        with patch.object(store, "create_collection", wraps=store.create_collection) as create:
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda _: registry.ensure("books"), range(32)))
        assert create.call_count == 1
        assert all(r.identifier_indexed for r in results)
        assert store.indexes("books") == [IDENTIFIER_INDEX]

    def test_invalid_name_creates_nothing(self, registry, store):
        with pytest.raises(InvalidCollectionNameError):
            registry.ensure("books2")
        assert store.collection_names() == []

    def test_existing_collection_is_used(self, store):
        store.create_collection("books")
        store.create_index("books", ["id"])
        assert CollectionRegistry(store).ensure("books").identifier_indexed

    def test_missing_index_is_repaired(self, registry, store):
        store.create_collection("books")
        registry.ensure("books")
        assert store.indexes("books") == [IDENTIFIER_INDEX]

    def test_index_failure_is_fatal(self, registry, store):
        with patch.object(store, "create_index", side_effect=StorageError("no space")):
            with pytest.raises(IndexCreationError, match="id index was not"):
                registry.ensure("books")

    def test_concurrent_creator_counts_as_present(self, registry, store):
        store.create_collection("books")
        # Another process created the collection after our existence check.
        with patch.object(store, "collection_names", return_value=[]):
            result = registry.ensure("books")
        assert result.identifier_indexed
        assert store.indexes("books") == [IDENTIFIER_INDEX]


class TestRequire:
    def test_missing_collection_not_created(self, registry, store):
        with pytest.raises(CollectionNotFoundError):
            registry.require("ghost")
        assert store.collection_names() == []

    def test_existing_collection(self, registry, store):
        store.create_collection("books")
        assert registry.require("books") == Collection(name="books", identifier_indexed=True)

    def test_invalid_name(self, registry):
        with pytest.raises(InvalidCollectionNameError):
            registry.require("gh0st")


class TestBootstrap:
    def test_creates_listed_collections(self, registry, store, manifest):
        report = registry.bootstrap(manifest)
        assert report.created == ["books", "authors"]
        assert report.existing == []
        assert store.collection_names() == ["authors", "books"]
        for name in ("books", "authors"):
            assert IDENTIFIER_INDEX in store.indexes(name)

    def test_second_run_creates_nothing(self, store, manifest):
        CollectionRegistry(store).bootstrap(manifest)
        report = CollectionRegistry(store).bootstrap(manifest)
        assert report.created == []
        assert report.existing == ["books", "authors"]

    def test_duplicates_and_blanks_skipped(self, registry):
        report = registry.ensure_all(["books", " ", "books", "authors "])
        assert report.created == ["books", "authors"]

    def test_invalid_name_aborts(self, registry, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("books\nbad-name\n", encoding="utf-8")
        with pytest.raises(InvalidCollectionNameError):
            registry.bootstrap(path)

    def test_missing_manifest(self, registry, tmp_path):
        with pytest.raises(ManifestError):
            registry.bootstrap(tmp_path / "nope.txt")


class TestReadManifest:
    def test_trims_and_drops_blank_lines(self, manifest):
        assert read_manifest(manifest) == ["books", "authors"]


class TestCollections:
    def test_lists_index_status(self, registry, store):
        registry.ensure("books")
        store.create_collection("raw")
        assert registry.collections() == [
            Collection(name="books", identifier_indexed=True),
            Collection(name="raw", identifier_indexed=False),
        ]
