"""Authenticated request executor.

Flow of `fetch()`:
1. Resolve the bearer credential from the configured providers (OAuth first,
   then API key). With an OAuth bearer, a non-empty API key also goes out as
   the `key` query parameter to identify the agent. A provider failure raises
   `AuthResolutionError` and nothing is sent.
2. Send exactly one HTTP request with `Authorization: Bearer <token>`
   (omitted when no provider yields a token).
3. Return the decoded JSON on 2xx, raise `HttpError` otherwise. Failures
   before a response exists raise `TransportError`.

No retries: callers that need them wrap `fetch()` themselves.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, NamedTuple, TypeVar

import httpx
from pydantic import BaseModel

from bkper.adapters.http_client import build_async_client
from bkper.core.config import BkperConfig
from bkper.core.domain.http_method import HttpMethod
from bkper.core.domain.models import RequestDescriptor, ResponseEnvelope
from bkper.core.errors import AuthResolutionError, HttpError, TransportError
from bkper.core.interfaces.token_provider import TokenProvider

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_BEARER_PREFIXES = ("Bearer ", "bearer ")


class Credentials(NamedTuple):
    bearer: str
    # Sent as the `key` query parameter next to an OAuth bearer.
    agent_key: str = ""


async def _produce(provider: TokenProvider | None) -> str:
    if provider is None:
        return ""
    try:
        token = await provider.produce_token()
    except AuthResolutionError:
        raise
    except Exception as exc:
        raise AuthResolutionError(
            f"{type(provider).__name__} failed to produce a token: {exc}"
        ) from exc
    if token is None:
        return ""
    if not isinstance(token, str):
        raise AuthResolutionError(
            f"{type(provider).__name__} returned {type(token).__name__}, expected str"
        )
    return _strip_bearer(token)


async def resolve_credentials(config: BkperConfig) -> Credentials:
    """Ask each configured provider once.

    The OAuth token is the bearer when present and the API key then only
    identifies the agent; otherwise the API key is the bearer. Any provider
    failure is reported as `AuthResolutionError`.
    """

    oauth_token = await _produce(config.oauth_token_provider)
    api_key = await _produce(config.api_key_provider)
    if oauth_token:
        return Credentials(oauth_token, api_key)
    return Credentials(api_key)


async def resolve_token(config: BkperConfig) -> str:
    """The bearer credential, or "" when none is available."""

    return (await resolve_credentials(config)).bearer


def _strip_bearer(token: str) -> str:
    token = token.strip()
    for prefix in _BEARER_PREFIXES:
        if token.startswith(prefix):
            return token[len(prefix):].strip()
    return token


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class HttpApiRequest:
    """A single call against the REST API, configured fluently.

    Example::

        user = await HttpApiRequest("v5/user", config).set_method("GET").fetch()
    """

    def __init__(self, path: str, config: BkperConfig | None = None) -> None:
        path = (path or "").strip().lstrip("/")
        if not path:
            raise ValueError("Request path must not be empty")
        self._config = config or BkperConfig()
        self._path = path
        self._method = HttpMethod.GET
        self._headers: dict[str, str] = {}
        self._params: list[tuple[str, str]] = []
        self._payload: Any = None

    @property
    def url(self) -> str:
        return f"{self._config.api_base_url}/{self._path}"

    def set_method(self, method: HttpMethod | str) -> "HttpApiRequest":
        self._method = HttpMethod.parse(method)
        return self

    def set_header(self, name: str, value: str | None) -> "HttpApiRequest":
        if value:
            self._headers[name] = value
        return self

    def add_param(self, name: str, value: Any) -> "HttpApiRequest":
        """Append a query parameter. Empty values are skipped; lists repeat the name."""

        if value is None or value == "":
            return self
        if isinstance(value, (list, tuple)):
            for item in value:
                self.add_param(name, item)
            return self
        self._params.append((name, _param_value(value)))
        return self

    def set_payload(self, payload: Any) -> "HttpApiRequest":
        self._payload = payload
        return self

    def descriptor(self) -> RequestDescriptor:
        return RequestDescriptor(
            path=self._path,
            method=self._method,
            payload=self._payload,
            params=list(self._params),
            headers=dict(self._headers),
        )

    async def fetch(self) -> Any:
        """Run the request and return the decoded payload."""

        envelope = await self.execute()
        return envelope.data

    async def fetch_model(self, model: type[ModelT]) -> ModelT | None:
        """Run the request and validate the payload into `model` (None on empty body)."""

        data = await self.fetch()
        if data is None:
            return None
        return model.model_validate(data)

    async def execute(self) -> ResponseEnvelope:
        """Run the request and return the full `ResponseEnvelope`."""

        descriptor = self.descriptor()
        credentials = await resolve_credentials(self._config)
        token = credentials.bearer
        headers = await self._build_headers(descriptor, token)
        params = list(descriptor.params)
        if credentials.agent_key:
            params.append(("key", credentials.agent_key))

        content: bytes | None = None
        if descriptor.payload is not None:
            if isinstance(descriptor.payload, str):
                content = descriptor.payload.encode("utf-8")
            else:
                content = json.dumps(descriptor.payload).encode("utf-8")
            headers.setdefault("Content-Type", "application/json")

        logger.debug(
            "%s %s (authenticated=%s)", descriptor.method.value, self.url, bool(token)
        )
        try:
            async with build_async_client(self._config) as client:
                response = await client.request(
                    descriptor.method.value,
                    self.url,
                    params=params,
                    headers=headers,
                    content=content,
                )
        except (httpx.RequestError, OSError) as exc:
            # Transports may raise socket errors (e.g. ConnectionResetError) unwrapped.
            logger.debug("%s %s failed: %r", descriptor.method.value, self.url, exc)
            raise TransportError(
                f"{descriptor.method.value} {self.url} failed: {exc}",
                request=_request_of(exc),
            ) from exc

        body = _decode_body(response)
        logger.debug(
            "%s %s -> %s", descriptor.method.value, self.url, response.status_code
        )
        if not response.is_success:
            raise HttpError.from_response(response, body)

        return ResponseEnvelope(
            status_code=response.status_code,
            data=body,
            headers=dict(response.headers),
        )

    async def _build_headers(self, descriptor: RequestDescriptor, token: str) -> dict[str, str]:
        headers: dict[str, str] = {}
        provider = self._config.request_headers_provider
        if provider is not None:
            extra = provider()
            if inspect.isawaitable(extra):
                extra = await extra
            for name, value in (extra or {}).items():
                if value:
                    headers[name] = value
        headers.update(descriptor.headers)

        # Exactly one credential, attached last.
        for name in [h for h in headers if h.lower() == "authorization"]:
            del headers[name]
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers


def _request_of(exc: Exception) -> httpx.Request | None:
    if not isinstance(exc, httpx.RequestError):
        return None
    # `RequestError.request` raises when the error was built without one.
    try:
        return exc.request
    except RuntimeError:
        return None


class HttpApiV5Request(HttpApiRequest):
    """Request against `v5/<path>`."""

    def __init__(self, path: str, config: BkperConfig | None = None) -> None:
        super().__init__(f"v5/{path.lstrip('/')}", config)


class HttpBooksApiV5Request(HttpApiRequest):
    """Request against `v5/books/<path>`."""

    def __init__(self, path: str, config: BkperConfig | None = None) -> None:
        super().__init__(f"v5/books/{path.lstrip('/')}", config)
