"""Book endpoints.

`load_book` lets `HttpError` propagate, so a missing book surfaces as a 404
the caller can catch. A 2xx reply without a body yields `None`.
"""

from __future__ import annotations

from typing import Any

from bkper.adapters.http_api_request import HttpApiV5Request, HttpBooksApiV5Request
from bkper.core.config import BkperConfig
from bkper.core.domain.models import Book


def _require_id(book_id: str) -> str:
    if not book_id or not book_id.strip():
        raise ValueError("Book id must not be empty")
    return book_id.strip()


async def list_books(config: BkperConfig) -> list[Book]:
    data = await HttpApiV5Request("books", config).fetch()
    items: Any = data.get("items") if isinstance(data, dict) else data
    if not isinstance(items, list):
        return []
    return [Book.model_validate(row) for row in items if isinstance(row, dict)]


async def load_book(config: BkperConfig, book_id: str) -> Book | None:
    return await HttpBooksApiV5Request(_require_id(book_id), config).fetch_model(Book)


async def update_book(config: BkperConfig, book: Book) -> Book | None:
    payload = book.model_dump(mode="json", by_alias=True, exclude_none=True)
    return await (
        HttpBooksApiV5Request(_require_id(book.id), config)
        .set_method("PUT")
        .set_payload(payload)
        .fetch_model(Book)
    )


async def audit_book(config: BkperConfig, book_id: str) -> None:
    """Trigger the asynchronous balances audit of a book."""

    await HttpBooksApiV5Request(f"{_require_id(book_id)}/audit", config).set_method("PATCH").fetch()
