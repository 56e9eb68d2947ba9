"""Credential provider contract.

Every way of obtaining a bearer credential (static API key, cached OAuth
token, refresh-token exchange, interactive login) implements the same single
capability, so the request executor never changes when the strategy does.
Plain callables are accepted too and wrapped by `CallableTokenProvider`.
"""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Protocol, Union, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    """Produces a bearer credential on demand.

    Rules:
    - `produce_token` is asynchronous because it may do I/O (token refresh).
    - An empty string means "no credential"; failures are raised, not returned.
    - Caching and refresh policy belong to the implementation.
    """

    async def produce_token(self) -> str:
        """Return the current bearer credential."""

        ...


TokenCallable = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]
TokenSource = Union[TokenProvider, TokenCallable]


class CallableTokenProvider(TokenProvider):
    """Wraps `() -> str` or `() -> Awaitable[str]`."""

    def __init__(self, func: TokenCallable) -> None:
        self._func = func

    async def produce_token(self) -> str:
        value = self._func()
        if inspect.isawaitable(value):
            value = await value
        return "" if value is None else value


def as_token_provider(source: TokenSource | None) -> TokenProvider | None:
    """Normalize a provider slot value into a `TokenProvider` (or None)."""

    if source is None:
        return None
    if isinstance(source, TokenProvider):
        return source
    if callable(source):
        return CallableTokenProvider(source)
    raise TypeError(f"Unsupported token provider: {type(source).__name__}")
