"""OAuth provider backed by locally stored credentials.

Credentials live in a JSON file (`~/.bkper-credentials.json` by default):

    {"access_token": "...", "refresh_token": "...", "expiry_date": 1700000000000}

`expiry_date` is epoch milliseconds. While the access token is valid it is
returned as is; otherwise the refresh token is exchanged at the OAuth token
endpoint and the file is rewritten.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

import httpx

from bkper.adapters.http_client import build_async_client
from bkper.core.config import DEFAULT_OAUTH_TOKEN_URL, BkperConfig
from bkper.core.errors import AuthResolutionError
from bkper.core.interfaces.token_provider import TokenProvider

logger = logging.getLogger(__name__)

# Refresh a bit before the real expiry.
EXPIRY_SKEW_SECONDS = 60.0


class StoredCredentialsTokenProvider(TokenProvider):
    """Cached access token with refresh-token exchange.

    Concurrent `produce_token` calls share one refresh: the lock serializes
    them and later callers see the freshly cached token.
    """

    def __init__(
        self,
        *,
        credentials_path: Path,
        client_id: str = "",
        client_secret: str = "",
        token_url: str = DEFAULT_OAUTH_TOKEN_URL,
        http_config: BkperConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.credentials_path = Path(credentials_path).expanduser()
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._http_config = http_config or BkperConfig()
        self._clock = clock
        self._credentials: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    def is_logged_in(self) -> bool:
        return self.credentials_path.exists()

    def load_credentials(self) -> dict[str, Any] | None:
        if not self.credentials_path.exists():
            return None
        try:
            data = json.loads(self.credentials_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise AuthResolutionError(
                f"Stored credentials at {self.credentials_path} are not valid JSON"
            ) from exc
        return data if isinstance(data, dict) else None

    def store_credentials(self, credentials: dict[str, Any]) -> Path:
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
        self.credentials_path.write_text(
            json.dumps(credentials, indent=4) + "\n", encoding="utf-8"
        )
        self._credentials = dict(credentials)
        return self.credentials_path

    def clear_credentials(self) -> bool:
        """Delete the stored credentials. Returns False if there were none."""

        self._credentials = None
        if not self.credentials_path.exists():
            return False
        self.credentials_path.unlink()
        return True

    async def produce_token(self) -> str:
        async with self._lock:
            credentials = self._credentials or await asyncio.to_thread(self.load_credentials)
            if not credentials:
                raise AuthResolutionError(
                    f"No local credentials found at {self.credentials_path}. Run `bkper login`."
                )
            if self._is_fresh(credentials):
                self._credentials = credentials
                return str(credentials["access_token"])

            credentials = await self._refresh(credentials)
            return str(credentials["access_token"])

    def _is_fresh(self, credentials: dict[str, Any]) -> bool:
        if not credentials.get("access_token"):
            return False
        expiry_ms = credentials.get("expiry_date")
        if not isinstance(expiry_ms, (int, float)):
            return False
        return (expiry_ms / 1000.0) - EXPIRY_SKEW_SECONDS > self._clock()

    async def _refresh(self, credentials: dict[str, Any]) -> dict[str, Any]:
        refresh_token = credentials.get("refresh_token")
        if not refresh_token:
            raise AuthResolutionError("Stored credentials have no refresh token. Run `bkper login`.")

        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        logger.debug("Refreshing OAuth access token at %s", self._token_url)
        try:
            async with build_async_client(self._http_config) as client:
                response = await client.post(self._token_url, data=form)
        except httpx.RequestError as exc:
            raise AuthResolutionError(f"Token refresh failed: {exc}") from exc

        if not response.is_success:
            raise AuthResolutionError(f"Token refresh failed: HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthResolutionError("Token endpoint returned invalid JSON") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise AuthResolutionError("Token endpoint returned no access_token")

        refreshed = dict(credentials)
        refreshed["access_token"] = access_token
        expires_in = payload.get("expires_in")
        if isinstance(expires_in, (int, float)):
            refreshed["expiry_date"] = int((self._clock() + expires_in) * 1000)
        else:
            refreshed.pop("expiry_date", None)
        for key in ("refresh_token", "token_type", "scope", "id_token"):
            if payload.get(key):
                refreshed[key] = payload[key]

        await asyncio.to_thread(self.store_credentials, refreshed)
        logger.info("OAuth access token refreshed")
        return refreshed
