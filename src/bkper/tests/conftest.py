from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from bkper.core.config import BkperConfig

BASE_URL = "https://api.test/bkper"


class Recorder:
    """MockTransport handler that records every request and replies with a canned response."""

    def __init__(self, status_code: int = 200, json: Any = None, **kwargs: Any) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._json = json
        self._kwargs = kwargs

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._json is not None:
            return httpx.Response(self._status_code, json=self._json, **self._kwargs)
        return httpx.Response(self._status_code, **self._kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_config(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> BkperConfig:
    kwargs.setdefault("api_base_url", BASE_URL)
    return BkperConfig(transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder(json={"id": "u1"})
