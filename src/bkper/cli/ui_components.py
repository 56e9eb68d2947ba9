"""Rich tables and panels used by the CLI commands."""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bkper.core.domain.models import Book, TransactionPage, User
from bkper.core.errors import HttpError


def build_books_table(books: list[Book]) -> Table:
    table = Table(title="Books")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Owner", style="magenta")
    table.add_column("Permission", style="green")
    for book in books:
        table.add_row(book.id, book.name or "", book.owner_name or "", book.permission or "")
    return table


def build_book_panel(book: Book) -> Panel:
    body = Text()
    body.append(f"{book.name or book.id}\n", style="bold")
    body.append(f"Id: {book.id}\n", style="dim")
    if book.owner_name:
        body.append(f"Owner: {book.owner_name}\n")
    if book.time_zone:
        body.append(f"Time zone: {book.time_zone}\n")
    if book.fraction_digits is not None:
        body.append(f"Fraction digits: {book.fraction_digits}\n")
    for key, value in sorted(book.properties.items()):
        body.append(f"{key} = {value}\n", style="dim")
    return Panel(body, title=Text("Book", style="bold cyan"), border_style="cyan")


def build_user_panel(user: User) -> Panel:
    body = Text()
    body.append(f"{user.full_name or user.name or '-'}\n", style="bold")
    if user.email:
        body.append(f"{user.email}\n")
    if user.id:
        body.append(f"Id: {user.id}", style="dim")
    return Panel(body, title=Text("User", style="bold cyan"), border_style="cyan")


def build_transactions_table(page: TransactionPage) -> Table:
    table = Table(title="Transactions", caption=f"cursor: {page.cursor}" if page.cursor else None)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Amount", style="green", justify="right")
    table.add_column("Description", style="white")
    table.add_column("Posted", style="dim")
    for tx in page.items:
        table.add_row(
            tx.date or "",
            tx.amount or "",
            tx.description or "",
            "yes" if tx.posted else "no",
        )
    return table


def format_http_error(exc: HttpError) -> str:
    hint = ""
    if exc.is_auth_error:
        hint = " (check BKPER_API_KEY or run `bkper login`)"
    return f"[red]HTTP {exc.status_code}:[/red] {escape(exc.message)}{hint}"
