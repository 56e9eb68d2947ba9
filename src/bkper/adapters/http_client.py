"""httpx client builder.

Centralizes timeouts, default headers and the transport so every request
(API calls and token refreshes alike) behaves the same, and tests can swap
in an `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from bkper.core.config import BkperConfig


def build_async_client(
    config: BkperConfig | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured defaults."""

    config = config or BkperConfig()
    headers: dict[str, str] = {
        "User-Agent": config.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=config.transport,
    )
