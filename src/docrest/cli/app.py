"""
Root Typer application for the docrest CLI.

Sub-commands live in their own modules and are attached with
``add_typer``; heavy imports (uvicorn, the API) stay inside commands.
"""

from __future__ import annotations

import typer
from typer import Typer

from docrest import __version__

app = Typer(
    name="docrest",
    help="docrest -- a small REST service over a schemaless document store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docrest {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """docrest CLI -- run the server and manage collections."""


# ── Sub-command registration ─────────────────────────────────────────────

from docrest.cli.collections import app as collections_app  # noqa: E402
from docrest.cli.serve import app as serve_app  # noqa: E402

app.add_typer(serve_app, name="serve", help="Start the API server.")
app.add_typer(collections_app, name="collections", help="Collection management.")
