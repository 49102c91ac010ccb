"""
Shared pytest fixtures for docrest tests.

``store`` is parametrised over both backends so every test that uses it
runs once against the in-memory store and once against SQLite.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Ensure docrest package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docrest.core.identifiers import PositionalPolicy, TokenPolicy
from docrest.core.protocols import DocumentStore
from docrest.core.registry import CollectionRegistry
from docrest.core.stores import MemoryDocumentStore, SqliteDocumentStore
from docrest.ops.context import OperationContext


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> Generator[DocumentStore, None, None]:
    """A fresh, empty document store for each backend."""
    if request.param == "memory":
        s: DocumentStore = MemoryDocumentStore()
    else:
        s = SqliteDocumentStore(tmp_path / "docrest.db")
    yield s
    s.close()


@pytest.fixture()
def registry(store: DocumentStore) -> CollectionRegistry:
    return CollectionRegistry(store)


@pytest.fixture(params=["token", "positional"])
def ctx(request: pytest.FixtureRequest, store: DocumentStore, registry: CollectionRegistry) -> OperationContext:
    """OperationContext for each store x identifier policy combination."""
    policy = TokenPolicy() if request.param == "token" else PositionalPolicy()
    return OperationContext(store=store, registry=registry, policy=policy, caller="test")


@pytest.fixture()
def manifest(tmp_path: Path) -> Path:
    """A collection manifest listing ``books`` and ``authors``."""
    path = tmp_path / "collections.txt"
    path.write_text("books\n  authors \n\n", encoding="utf-8")
    return path
