"""Tests for collection bootstrap and listing operations."""

from __future__ import annotations

from docrest.ops.collections import bootstrap_collections, list_collections
from docrest.ops.requests import BootstrapRequest


class TestBootstrapCollections:
    def test_report(self, ctx, manifest):
        result = bootstrap_collections(ctx, BootstrapRequest(manifest_path=str(manifest)))
        assert result.success
        assert result.data == {"created": ["books", "authors"], "existing": []}

    def test_rerun_reports_existing(self, ctx, manifest):
        bootstrap_collections(ctx, BootstrapRequest(manifest_path=str(manifest)))
        result = bootstrap_collections(ctx, BootstrapRequest(manifest_path=str(manifest)))
        assert result.data == {"created": [], "existing": ["books", "authors"]}

    def test_missing_manifest(self, ctx, tmp_path):
        result = bootstrap_collections(ctx, BootstrapRequest(manifest_path=str(tmp_path / "nope")))
        assert not result.success
        assert result.error.code == "INVALID_INPUT"

    def test_invalid_name(self, ctx, tmp_path):
        path = tmp_path / "m.txt"
        path.write_text("books\n9lives\n", encoding="utf-8")
        result = bootstrap_collections(ctx, BootstrapRequest(manifest_path=str(path)))
        assert result.error.code == "INVALID_INPUT"


class TestListCollections:
    def test_lists_ensured_collections(self, ctx):
        ctx.registry.ensure("books")
        result = list_collections(ctx)
        assert result.data == [{"name": "books", "identifier_indexed": True}]
