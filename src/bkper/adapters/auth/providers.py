"""Static API key provider."""

from __future__ import annotations

from bkper.core.interfaces.token_provider import TokenProvider


class StaticKeyProvider(TokenProvider):
    """Returns the same key on every call; a missing key resolves to ""."""

    def __init__(self, key: str | None) -> None:
        self._key = key or ""

    async def produce_token(self) -> str:
        return self._key

    def __repr__(self) -> str:
        # Never print the key itself.
        state = "set" if self._key else "empty"
        return f"StaticKeyProvider(<{state}>)"
