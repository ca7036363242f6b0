#!/usr/bin/env python3
"""Command-line entry point for running and initializing the Bookstore API."""

import typer
from rich.console import Console

from src.bookstore.core.errors import BookstoreError

console = Console()

app = typer.Typer(
    name="bookstore",
    help="Bookstore API - serve the HTTP API and manage its database schema",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.command()
def serve(
    init_db: bool = typer.Option(
        False, "--init-db", help="Create or alter the books table before serving"
    ),
    host: str | None = typer.Option(None, help="Interface to bind (default from config)"),
    port: int | None = typer.Option(None, help="Port to listen on (default from config)"),
) -> None:
    """
    🚀 Start the HTTP API.

    Fetches the database password, connects, optionally migrates the schema
    and serves until interrupted. Startup failures exit non-zero.
    """
    import uvicorn

    from src.bookstore.api.http.app import create_app
    from src.bookstore.runtime.context import get_config

    config = get_config()
    application = create_app(migrate=True if init_db else None)

    console.print(
        f"[blue]Serving on {host or config.app.host}:{port or config.app.port}[/blue]"
    )
    uvicorn.run(
        application,
        host=host or config.app.host,
        port=port or config.app.port,
        access_log=False,  # Request logging happens in middleware
    )


@app.command("init-db")
def init_db_command() -> None:
    """
    🗄️  Create or alter the books table, then exit.
    """
    from src.bookstore.runtime.init_db import init_db

    try:
        init_db()
    except BookstoreError as e:
        console.print(f"[red]❌ Database initialization failed: {e}[/red]")
        raise typer.Exit(1) from e

    console.print("[green]✅ Database schema is up to date[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
