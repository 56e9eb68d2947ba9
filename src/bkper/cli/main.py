"""`bkper` command line.

Commands map one-to-one onto library calls; errors from the request pipeline
are printed and turned into exit code 1.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from bkper.cli.ui_components import (
    build_book_panel,
    build_books_table,
    build_transactions_table,
    build_user_panel,
    format_http_error,
)
from bkper.client import Bkper, build_local_auth
from bkper.core.config import BkperSettings, write_user_env_vars
from bkper.core.errors import AuthResolutionError, HttpError, TransportError

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Bkper REST API client.")

_console = Console()


def _settings() -> BkperSettings:
    return BkperSettings()


def _bkper() -> Bkper:
    return Bkper.from_settings(_settings())


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except HttpError as exc:
        _console.print(format_http_error(exc))
        raise typer.Exit(code=1) from exc
    except AuthResolutionError as exc:
        _console.print(f"[red]Authentication failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except TransportError as exc:
        _console.print(f"[red]Network error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@app.command()
def login(
    refresh_token: str = typer.Option(
        ...,
        prompt="OAuth refresh token",
        hide_input=True,
        help="Refresh token authorized for the userinfo.email scope.",
    ),
) -> None:
    """Store OAuth credentials locally and verify them."""

    provider = build_local_auth(_settings())
    if provider.is_logged_in():
        _console.print("[yellow]Already logged in; replacing stored credentials.[/yellow]")
    provider.store_credentials({"refresh_token": refresh_token.strip()})
    try:
        _run(provider.produce_token())
    except typer.Exit:
        provider.clear_credentials()
        raise
    _console.print(f"[green]Logged in.[/green] Credentials stored at {provider.credentials_path}")


@app.command()
def logout() -> None:
    """Delete locally stored OAuth credentials."""

    provider = build_local_auth(_settings())
    provider.clear_credentials()
    _console.print("Logged out.")


@app.command()
def user() -> None:
    """Show the current user."""

    current = _run(_bkper().get_user())
    _console.print(build_user_panel(current))


@app.command()
def books() -> None:
    """List the books the current user can access."""

    items = _run(_bkper().get_books())
    _console.print(build_books_table(items))


@app.command()
def book(book_id: str = typer.Argument(..., help="Book id, as in the app URL.")) -> None:
    """Show one book."""

    found = _run(_bkper().get_book(book_id))
    if found is None:
        _console.print(f"[yellow]Book {escape(book_id)} returned no data.[/yellow]")
        raise typer.Exit(code=1)
    _console.print(build_book_panel(found))


@app.command()
def transactions(
    book_id: str = typer.Argument(..., help="Book id."),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Bkper query."),
    limit: int = typer.Option(25, "--limit", "-l", min=1, max=1000),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Cursor of the next page."),
) -> None:
    """List one page of transactions of a book."""

    page = _run(_bkper().get_transactions(book_id, query=query, limit=limit, cursor=cursor))
    _console.print(build_transactions_table(page))


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    api_key = typer.prompt("API key", default="", show_default=False, hide_input=True).strip()
    client_id = typer.prompt("OAuth client id", default="", show_default=False).strip()
    client_secret = typer.prompt(
        "OAuth client secret", default="", show_default=False, hide_input=True
    ).strip()

    values = {
        "BKPER_API_KEY": api_key,
        "BKPER_OAUTH_CLIENT_ID": client_id,
        "BKPER_OAUTH_CLIENT_SECRET": client_secret,
    }
    env_path = write_user_env_vars({k: v for k, v in values.items() if v})
    _console.print(f"[green]Saved config to:[/green] {env_path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
