"""Bkper REST API client."""

from bkper.adapters.auth.local_auth import StoredCredentialsTokenProvider
from bkper.adapters.auth.providers import StaticKeyProvider
from bkper.adapters.http_api_request import (
    HttpApiRequest,
    HttpApiV5Request,
    HttpBooksApiV5Request,
)
from bkper.client import Bkper
from bkper.core.config import BkperConfig, BkperSettings
from bkper.core.domain.http_method import HttpMethod
from bkper.core.errors import AuthResolutionError, BkperError, HttpError, TransportError
from bkper.core.interfaces.token_provider import CallableTokenProvider, TokenProvider

__all__ = [
    "AuthResolutionError",
    "Bkper",
    "BkperConfig",
    "BkperError",
    "BkperSettings",
    "CallableTokenProvider",
    "HttpApiRequest",
    "HttpApiV5Request",
    "HttpBooksApiV5Request",
    "HttpError",
    "HttpMethod",
    "StaticKeyProvider",
    "StoredCredentialsTokenProvider",
    "TokenProvider",
    "TransportError",
]
