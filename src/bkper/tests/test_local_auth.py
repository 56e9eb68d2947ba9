import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from bkper.adapters.auth.local_auth import StoredCredentialsTokenProvider
from bkper.core.config import BkperConfig
from bkper.core.errors import AuthResolutionError

NOW = 1_700_000_000.0
TOKEN_URL = "https://oauth.test/token"


def _provider(tmp_path, handler, credentials=None):
    path = tmp_path / "creds.json"
    if credentials is not None:
        path.write_text(json.dumps(credentials), encoding="utf-8")
    return StoredCredentialsTokenProvider(
        credentials_path=path,
        client_id="cid",
        client_secret="secret",
        token_url=TOKEN_URL,
        http_config=BkperConfig(transport=httpx.MockTransport(handler)),
        clock=lambda: NOW,
    )


class TokenEndpoint:
    def __init__(self, status_code=200, payload=None, delay=0.0):
        self.calls = []
        self._status_code = status_code
        self._payload = payload if payload is not None else {"access_token": "fresh", "expires_in": 3600}
        self._delay = delay

    async def __call__(self, request):
        self.calls.append(parse_qs(request.content.decode()))
        if self._delay:
            await asyncio.sleep(self._delay)
        return httpx.Response(self._status_code, json=self._payload)


def test_valid_token_is_returned_without_refresh(tmp_path):
    endpoint = TokenEndpoint()
    creds = {"access_token": "cached", "refresh_token": "r", "expiry_date": (NOW + 600) * 1000}
    provider = _provider(tmp_path, endpoint, creds)

    assert asyncio.run(provider.produce_token()) == "cached"
    assert endpoint.calls == []


def test_expired_token_is_refreshed_and_stored(tmp_path):
    endpoint = TokenEndpoint()
    creds = {"access_token": "old", "refresh_token": "r1", "expiry_date": (NOW - 10) * 1000}
    provider = _provider(tmp_path, endpoint, creds)

    assert asyncio.run(provider.produce_token()) == "fresh"

    sent = endpoint.calls[0]
    assert sent["grant_type"] == ["refresh_token"]
    assert sent["refresh_token"] == ["r1"]
    assert sent["client_id"] == ["cid"]
    stored = json.loads(provider.credentials_path.read_text(encoding="utf-8"))
    assert stored["access_token"] == "fresh"
    assert stored["refresh_token"] == "r1"
    assert stored["expiry_date"] == int((NOW + 3600) * 1000)


def test_token_within_skew_is_refreshed(tmp_path):
    endpoint = TokenEndpoint()
    creds = {"access_token": "old", "refresh_token": "r", "expiry_date": (NOW + 30) * 1000}
    provider = _provider(tmp_path, endpoint, creds)

    assert asyncio.run(provider.produce_token()) == "fresh"


def test_concurrent_calls_share_one_refresh(tmp_path):
    endpoint = TokenEndpoint(delay=0.01)
    creds = {"refresh_token": "r"}
    provider = _provider(tmp_path, endpoint, creds)

    async def many():
        return await asyncio.gather(*(provider.produce_token() for _ in range(5)))

    assert asyncio.run(many()) == ["fresh"] * 5
    assert len(endpoint.calls) == 1


def test_missing_credentials_raise(tmp_path):
    provider = _provider(tmp_path, TokenEndpoint())

    assert not provider.is_logged_in()
    with pytest.raises(AuthResolutionError):
        asyncio.run(provider.produce_token())


def test_missing_refresh_token_raises(tmp_path):
    provider = _provider(tmp_path, TokenEndpoint(), {"access_token": "x"})

    with pytest.raises(AuthResolutionError):
        asyncio.run(provider.produce_token())


def test_refresh_rejected_raises(tmp_path):
    endpoint = TokenEndpoint(400, {"error": "invalid_grant"})
    provider = _provider(tmp_path, endpoint, {"refresh_token": "revoked"})

    with pytest.raises(AuthResolutionError, match="HTTP 400"):
        asyncio.run(provider.produce_token())


def test_refresh_network_failure_raises(tmp_path):
    def handler(request):
        raise httpx.ConnectError("dns failure", request=request)

    provider = _provider(tmp_path, handler, {"refresh_token": "r"})

    with pytest.raises(AuthResolutionError):
        asyncio.run(provider.produce_token())


def test_store_and_clear_credentials(tmp_path):
    provider = _provider(tmp_path, TokenEndpoint())

    provider.store_credentials({"refresh_token": "r"})
    assert provider.is_logged_in()
    assert provider.clear_credentials() is True
    assert not provider.is_logged_in()
    assert provider.clear_credentials() is False


def test_credential_file_io_runs_in_worker_threads(tmp_path, monkeypatch):
    offloaded = []
    real_to_thread = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await real_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
    provider = _provider(tmp_path, TokenEndpoint(), {"refresh_token": "r"})

    assert asyncio.run(provider.produce_token()) == "fresh"
    assert offloaded == ["load_credentials", "store_credentials"]
