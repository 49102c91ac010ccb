"""SQLite-backed document store.

Each collection is a table of ``(position, body)`` rows where ``body`` is
the JSON-encoded document.  Attribute indexes are SQLite expression
indexes over ``json_extract(body, <path>)``, so equality queries are
answered from a B-tree instead of a table scan.

Layout::

    _collections(cid INTEGER PRIMARY KEY, name TEXT UNIQUE)
    _indexes(cid INTEGER, path TEXT, PRIMARY KEY (cid, path))
    coll_<cid>(position INTEGER PRIMARY KEY AUTOINCREMENT, body TEXT)

Tables are keyed by catalog id rather than by name because SQLite table
names are case-insensitive while collection names are not.

Usage::

    store = SqliteDocumentStore("storage/docrest.db")
    store.create_collection("books")
    store.create_index("books", ["id"])
    pos = store.insert("books", {"id": "abc", "name": "book1"})
    store.evaluate_query("books", Query("id", "abc", limit=1))   # {pos}
"""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from docrest.core.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    PositionNotFoundError,
    QueryError,
    StorageError,
)
from docrest.core.logging import get_logger
from docrest.core.protocols import Query, QuerySpec

logger = get_logger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS _collections ("
    " cid INTEGER PRIMARY KEY AUTOINCREMENT,"
    " name TEXT NOT NULL UNIQUE)",
    "CREATE TABLE IF NOT EXISTS _indexes ("
    " cid INTEGER NOT NULL REFERENCES _collections(cid),"
    " path TEXT NOT NULL,"
    " PRIMARY KEY (cid, path))",
)


def _json_path(path: Sequence[str]) -> str:
    """Render an attribute path as a quoted SQLite JSON path literal."""
    parts = "".join('."' + p.replace('"', '""') + '"' for p in path)
    # Embedded in SQL as a string literal: single quotes doubled.
    return "'$" + parts.replace("'", "''") + "'"


def _type_guard(value: Any) -> tuple[str, ...]:
    if isinstance(value, bool):
        return ("true", "false")
    if isinstance(value, (int, float)):
        return ("integer", "real")
    return ("text",)


class SqliteDocumentStore:
    """
    Embedded implementation of :class:`~docrest.core.protocols.DocumentStore`.

    One connection is shared by all worker threads; a re-entrant lock
    serialises access to it.  ``timeout`` is handed to SQLite and bounds how
    long a call waits for a database file locked by another process.
    """

    def __init__(self, path: str | Path = ":memory:", *, timeout: float = 5.0) -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(
                self.path,
                timeout=timeout,
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as exc:
            raise StorageError(f"could not open store at {self.path}", cause=exc) from exc
        self._lock = threading.RLock()
        self._tables: dict[str, str] = {}
        with self._transaction():
            for ddl in _SCHEMA:
                self._conn.execute(ddl)

    # --- collections ------------------------------------------------------

    def collection_names(self) -> list[str]:
        with self._lock, self._errors("list collections"):
            rows = self._conn.execute("SELECT name FROM _collections ORDER BY name").fetchall()
        return [r[0] for r in rows]

    def create_collection(self, name: str) -> None:
        with self._lock, self._errors("create collection", collection=name):
            if self._lookup_table(name) is not None:
                raise CollectionExistsError(f"collection '{name}' already exists").with_context(
                    collection=name
                )
            with self._transaction():
                cur = self._conn.execute("INSERT INTO _collections (name) VALUES (?)", (name,))
                table = f"coll_{cur.lastrowid}"
                self._conn.execute(
                    f'CREATE TABLE "{table}" ('
                    " position INTEGER PRIMARY KEY AUTOINCREMENT,"
                    " body TEXT NOT NULL)"
                )
            self._tables[name] = table
        logger.debug("sqlite_collection_created", collection=name, table=table)

    def create_index(self, collection: str, path: Sequence[str]) -> None:
        dotted = ".".join(path)
        with self._lock, self._errors("create index", collection=collection):
            table = self._table(collection)
            cid = int(table.removeprefix("coll_"))
            existing = self._conn.execute(
                "SELECT 1 FROM _indexes WHERE cid = ? AND path = ?", (cid, dotted)
            ).fetchone()
            if existing:
                return
            with self._transaction():
                cur = self._conn.execute(
                    "INSERT INTO _indexes (cid, path) VALUES (?, ?)", (cid, dotted)
                )
                self._conn.execute(
                    f'CREATE INDEX "ix_{cid}_{cur.lastrowid}" ON "{table}"'
                    f" (json_extract(body, {_json_path(path)}))"
                )

    def indexes(self, collection: str) -> list[tuple[str, ...]]:
        with self._lock, self._errors("list indexes", collection=collection):
            cid = int(self._table(collection).removeprefix("coll_"))
            rows = self._conn.execute(
                "SELECT path FROM _indexes WHERE cid = ? ORDER BY path", (cid,)
            ).fetchall()
        return [tuple(r[0].split(".")) for r in rows]

    # --- documents --------------------------------------------------------

    def insert(self, collection: str, doc: dict[str, Any]) -> int:
        body = json.dumps(doc, separators=(",", ":"))
        with self._lock, self._errors("insert document", collection=collection):
            table = self._table(collection)
            cur = self._conn.execute(f'INSERT INTO "{table}" (body) VALUES (?)', (body,))
            return int(cur.lastrowid)

    def read(self, collection: str, position: int) -> dict[str, Any]:
        with self._lock, self._errors("read document", collection=collection):
            table = self._table(collection)
            row = self._conn.execute(
                f'SELECT body FROM "{table}" WHERE position = ?', (position,)
            ).fetchone()
        if row is None:
            raise PositionNotFoundError(f"no document at position {position}").with_context(
                collection=collection, position=position
            )
        return json.loads(row[0])

    def update(self, collection: str, position: int, doc: dict[str, Any]) -> None:
        body = json.dumps(doc, separators=(",", ":"))
        with self._lock, self._errors("update document", collection=collection):
            table = self._table(collection)
            cur = self._conn.execute(
                f'UPDATE "{table}" SET body = ? WHERE position = ?', (body, position)
            )
            if cur.rowcount == 0:
                raise PositionNotFoundError(f"no document at position {position}").with_context(
                    collection=collection, position=position
                )

    def delete(self, collection: str, position: int) -> None:
        with self._lock, self._errors("delete document", collection=collection):
            table = self._table(collection)
            cur = self._conn.execute(f'DELETE FROM "{table}" WHERE position = ?', (position,))
            if cur.rowcount == 0:
                raise PositionNotFoundError(f"no document at position {position}").with_context(
                    collection=collection, position=position
                )

    def evaluate_query(self, collection: str, query: QuerySpec) -> set[int]:
        with self._lock, self._errors("evaluate query", collection=collection):
            table = self._table(collection)
            if not isinstance(query, Query):
                rows = self._conn.execute(f'SELECT position FROM "{table}"').fetchall()
                return {r[0] for r in rows}

            if query.path not in self.indexes(collection):
                raise QueryError(
                    f"please index '{query.attribute}' and retry the query"
                ).with_context(collection=collection)

            expr = f"json_extract(body, {_json_path(query.path)})"
            jtype = f"json_type(body, {_json_path(query.path)})"
            if query.value is None:
                sql = f'SELECT position FROM "{table}" WHERE {jtype} = \'null\''
                params: tuple[Any, ...] = ()
            else:
                guard = _type_guard(query.value)
                marks = ", ".join("?" for _ in guard)
                sql = f'SELECT position FROM "{table}" WHERE {expr} = ? AND {jtype} IN ({marks})'
                params = (query.value, *guard)
            sql += " ORDER BY position"
            if query.limit is not None:
                sql += " LIMIT ?"
                params = (*params, query.limit)
            rows = self._conn.execute(sql, params).fetchall()
        return {r[0] for r in rows}

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # --- internal helpers -------------------------------------------------

    def _lookup_table(self, name: str) -> str | None:
        table = self._tables.get(name)
        if table is not None:
            return table
        row = self._conn.execute("SELECT cid FROM _collections WHERE name = ?", (name,)).fetchone()
        if row is None:
            return None
        table = f"coll_{row[0]}"
        self._tables[name] = table
        return table

    def _table(self, name: str) -> str:
        table = self._lookup_table(name)
        if table is None:
            raise CollectionNotFoundError(f"collection '{name}' does not exist").with_context(
                collection=name
            )
        return table

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    @contextmanager
    def _errors(self, action: str, collection: str | None = None) -> Iterator[None]:
        """Translate sqlite3 failures into StorageError."""
        try:
            yield
        except sqlite3.OperationalError as exc:
            locked = "locked" in str(exc) or "busy" in str(exc)
            raise StorageError(
                f"could not {action}: {exc}", retryable=locked, cause=exc
            ).with_context(collection=collection) from exc
        except sqlite3.Error as exc:
            raise StorageError(f"could not {action}: {exc}", cause=exc).with_context(
                collection=collection
            ) from exc
