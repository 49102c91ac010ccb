"""
CLI utility helpers -- output formatting and store management.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from docrest.core.identifiers import make_policy
from docrest.core.protocols import DocumentStore
from docrest.core.registry import CollectionRegistry
from docrest.core.settings import DocRestSettings
from docrest.core.stores import open_store
from docrest.ops.context import OperationContext
from docrest.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


# ── Store helper ─────────────────────────────────────────────────────────


def make_context(database: str | None = None) -> tuple[OperationContext, DocumentStore]:
    """Create an ``OperationContext`` + store pair for CLI commands.

    ``database`` overrides ``DOCREST_DATABASE_URL``.
    """
    settings = DocRestSettings()
    store = open_store(database or settings.database_url, timeout=settings.store_timeout)
    ctx = OperationContext(
        store=store,
        registry=CollectionRegistry(store),
        policy=make_policy(settings.identifier_policy),
        caller="cli",
    )
    return ctx, store


# ── Output helpers ───────────────────────────────────────────────────────


def output_result(
    result: OperationResult[Any],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal."""
    if not result.success:
        err = result.error
        msg = err.message if err else "Unknown error"
        code = err.code if err else "ERROR"
        err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
        raise typer.Exit(code=1)

    data = result.data

    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        _print_table(data, title=title)
    else:
        _print_dict(data or {}, title=title)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in items[0]:
        table.add_column(col, overflow="fold")
    for item in items:
        table.add_row(*(str(v) for v in item.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        if isinstance(v, list):
            v = ", ".join(str(x) for x in v) or "-"
        console.print(f"  [cyan]{k}[/cyan]: {v}")
