"""Entry point of the library.

Example::

    bkper = Bkper.from_settings(BkperSettings())
    book = await bkper.get_book("agtzfmJrcGVyLWhyZHIT...")
"""

from __future__ import annotations

from bkper.adapters.auth.local_auth import StoredCredentialsTokenProvider
from bkper.adapters.auth.providers import StaticKeyProvider
from bkper.core.config import BkperConfig, BkperSettings
from bkper.core.domain.models import Book, TransactionPage, User
from bkper.core.services import book_service, transaction_service, user_service


def build_config(settings: BkperSettings) -> BkperConfig:
    """Wire providers from settings: stored OAuth credentials (if any) and the API key."""

    http_config = BkperConfig(
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
    )
    oauth = None
    if settings.credentials_path.expanduser().exists():
        oauth = build_local_auth(settings, http_config=http_config)
    return BkperConfig(
        api_key_provider=StaticKeyProvider(settings.api_key),
        oauth_token_provider=oauth,
        api_base_url=settings.api_base_url,
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
    )


def build_local_auth(
    settings: BkperSettings, *, http_config: BkperConfig | None = None
) -> StoredCredentialsTokenProvider:
    return StoredCredentialsTokenProvider(
        credentials_path=settings.credentials_path,
        client_id=settings.oauth_client_id,
        client_secret=settings.oauth_client_secret,
        token_url=settings.oauth_token_url,
        http_config=http_config,
    )


class Bkper:
    """Facade over the API services sharing one `BkperConfig`."""

    def __init__(self, config: BkperConfig | None = None) -> None:
        self.config = config or BkperConfig()

    @classmethod
    def from_settings(cls, settings: BkperSettings | None = None) -> "Bkper":
        return cls(build_config(settings or BkperSettings()))

    async def get_book(self, book_id: str) -> Book | None:
        return await book_service.load_book(self.config, book_id)

    async def get_books(self) -> list[Book]:
        return await book_service.list_books(self.config)

    async def get_user(self) -> User:
        return await user_service.get_user(self.config)

    async def get_transactions(
        self,
        book_id: str,
        *,
        query: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> TransactionPage:
        return await transaction_service.list_transactions(
            self.config, book_id, query=query, limit=limit, cursor=cursor
        )
