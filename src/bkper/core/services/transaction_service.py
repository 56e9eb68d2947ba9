"""Transaction listing (one page per call)."""

from __future__ import annotations

from bkper.adapters.http_api_request import HttpBooksApiV5Request
from bkper.core.config import BkperConfig
from bkper.core.domain.models import TransactionPage


async def list_transactions(
    config: BkperConfig,
    book_id: str,
    *,
    query: str | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> TransactionPage:
    if not book_id or not book_id.strip():
        raise ValueError("Book id must not be empty")
    if limit is not None and limit <= 0:
        raise ValueError("limit must be positive")

    data = await (
        HttpBooksApiV5Request(f"{book_id.strip()}/transactions", config)
        .add_param("query", query)
        .add_param("limit", limit)
        .add_param("cursor", cursor)
        .fetch()
    )
    return TransactionPage.model_validate(data or {})
