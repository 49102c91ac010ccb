"""
CLI: ``docrest serve`` -- start the API server.
"""

from __future__ import annotations

import typer

from docrest.cli.utils import console

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address [default: DOCREST_HOST]"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port [default: DOCREST_PORT]"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the docrest REST API server."""
    import uvicorn

    from docrest.api.deps import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting docrest API[/bold green] on {host}:{port}")
    uvicorn.run(
        "docrest.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
