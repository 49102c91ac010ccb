"""
CLI: ``docrest collections`` -- collection management commands.
"""

from __future__ import annotations

import typer

from docrest.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command("bootstrap")
def bootstrap(
    manifest: str = typer.Argument(..., help="File listing one collection name per line"),
    database: str | None = typer.Option(None, "--database", "-d", help="Store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Create every collection listed in MANIFEST that does not exist yet."""
    from docrest.ops.collections import bootstrap_collections
    from docrest.ops.requests import BootstrapRequest

    ctx, store = make_context(database)
    try:
        result = bootstrap_collections(ctx, BootstrapRequest(manifest_path=manifest))
        output_result(result, as_json=json_out, title="Bootstrap")
    finally:
        store.close()


@app.command("list")
def list_collections(
    database: str | None = typer.Option(None, "--database", "-d", help="Store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List collections and whether their id index exists."""
    from docrest.ops.collections import list_collections as _list

    ctx, store = make_context(database)
    try:
        result = _list(ctx)
        output_result(result, as_json=json_out, title="Collections")
    finally:
        store.close()
