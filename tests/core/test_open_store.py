"""Tests for store URL parsing and the ``open_store`` factory."""

from __future__ import annotations

import pytest

from docrest.core.stores import MemoryDocumentStore, SqliteDocumentStore, _parse_url, open_store


class TestParseUrl:
    @pytest.mark.parametrize("url", ["memory", "memory://"])
    def test_memory(self, url):
        assert _parse_url(url) == ("memory", "")

    def test_sqlite_file(self):
        assert _parse_url("sqlite:///storage/docrest.db") == ("sqlite", "storage/docrest.db")

    def test_sqlite_in_memory(self):
        assert _parse_url("sqlite:///:memory:") == ("sqlite", ":memory:")
        assert _parse_url("sqlite://") == ("sqlite", ":memory:")

    def test_bare_path_is_sqlite(self):
        assert _parse_url("data/docs.db") == ("sqlite", "data/docs.db")

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="unsupported store URL"):
            _parse_url("postgresql://localhost/db")


class TestOpenStore:
    def test_memory(self):
        store = open_store("memory://")
        assert isinstance(store, MemoryDocumentStore)

    def test_sqlite(self, tmp_path):
        store = open_store(f"sqlite:///{tmp_path / 'x.db'}", timeout=1.0)
        try:
            assert isinstance(store, SqliteDocumentStore)
            assert (tmp_path / "x.db").exists()
        finally:
            store.close()
