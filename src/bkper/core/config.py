"""Client configuration.

Two layers:
- `BkperSettings` reads environment variables and `.env` files once
  (pydantic-settings) at startup.
- `BkperConfig` is the resolved, explicit configuration handed to every
  request. The request pipeline never reads `os.environ` on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Mapping

import httpx
import typer
from dotenv import set_key
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bkper.core.interfaces.token_provider import TokenSource, as_token_provider

DEFAULT_API_BASE_URL = "https://app.bkper.com/_ah/api/bkper"
DEFAULT_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_USER_AGENT = "bkper-py/0.1"

HeadersProvider = Callable[[], "Mapping[str, str] | Awaitable[Mapping[str, str]]"]


def get_user_config_dir() -> Path:
    """Per-user configuration directory (platform conventions via Click)."""

    return Path(typer.get_app_dir("bkper"))


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Set `values` in the per-user `.env`, keeping any other entries.

    `None` values are skipped.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    for key, value in sorted(values.items()):
        if value is not None:
            set_key(env_path, key, value, quote_mode="never")
    return env_path


class BkperSettings(BaseSettings):
    """Settings loaded from `BKPER_*` environment variables and `.env` files."""

    model_config = SettingsConfigDict(
        env_prefix="BKPER_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first, then the per-user one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str = Field(
        default="",
        description="API key identifying the agent. Empty means unauthenticated.",
    )
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        min_length=8,
        description="Base URL of the REST API, without trailing slash.",
    )
    oauth_client_id: str = Field(
        default="",
        description="OAuth2 client id used to refresh stored credentials.",
    )
    oauth_client_secret: str = Field(
        default="",
        description="OAuth2 client secret used to refresh stored credentials.",
    )
    oauth_token_url: str = Field(
        default=DEFAULT_OAUTH_TOKEN_URL,
        min_length=8,
        description="OAuth2 token endpoint for refresh-token exchanges.",
    )
    credentials_path: Path = Field(
        default_factory=lambda: Path.home() / ".bkper-credentials.json",
        description="Where locally stored OAuth credentials live.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent sent with every request.",
    )


@dataclass
class BkperConfig:
    """Resolved configuration for the request pipeline.

    Provider slots accept a `TokenProvider` or a plain zero-argument callable
    returning a string (or an awaitable of one); callables are wrapped on
    construction so the rest of the pipeline only sees `TokenProvider`.
    """

    api_key_provider: TokenSource | None = None
    oauth_token_provider: TokenSource | None = None
    request_headers_provider: HeadersProvider | None = None
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self.api_key_provider = as_token_provider(self.api_key_provider)
        self.oauth_token_provider = as_token_provider(self.oauth_token_provider)
        self.api_base_url = self.api_base_url.rstrip("/")

