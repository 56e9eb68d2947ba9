import httpx
from typer.testing import CliRunner

from bkper.adapters.auth.local_auth import StoredCredentialsTokenProvider
from bkper.cli import main as cli
from bkper.client import Bkper
from bkper.core.config import BkperConfig, BkperSettings
from conftest import Recorder, make_config

runner = CliRunner()


def _use_bkper(monkeypatch, handler):
    monkeypatch.setattr(cli, "_bkper", lambda: Bkper(make_config(handler, api_key_provider=lambda: "k")))


def _use_local_auth(monkeypatch, tmp_path, handler):
    def build(settings, **kwargs):
        return StoredCredentialsTokenProvider(
            credentials_path=tmp_path / "creds.json",
            token_url="https://oauth.test/token",
            http_config=BkperConfig(transport=httpx.MockTransport(handler)),
        )

    monkeypatch.setattr(cli, "_settings", lambda: BkperSettings(_env_file=None))
    monkeypatch.setattr(cli, "build_local_auth", build)


def test_user_command(monkeypatch):
    _use_bkper(monkeypatch, Recorder(json={"id": "u1", "fullName": "Ada Lovelace"}))

    result = runner.invoke(cli.app, ["user"])

    assert result.exit_code == 0
    assert "Ada Lovelace" in result.output


def test_books_command(monkeypatch):
    _use_bkper(monkeypatch, Recorder(json={"items": [{"id": "b1", "name": "Ledger"}]}))

    result = runner.invoke(cli.app, ["books"])

    assert result.exit_code == 0
    assert "Ledger" in result.output


def test_book_not_found_exits_with_error(monkeypatch):
    _use_bkper(monkeypatch, Recorder(404, json={"error": {"code": 404, "message": "Book not found"}}))

    result = runner.invoke(cli.app, ["book", "missing"])

    assert result.exit_code == 1
    assert "Book not found" in result.output


def test_transactions_command(monkeypatch):
    recorder = Recorder(json={"items": [{"date": "2024-01-02", "amount": "5.00", "description": "coffee"}]})
    _use_bkper(monkeypatch, recorder)

    result = runner.invoke(cli.app, ["transactions", "b1", "--query", "coffee", "--limit", "5"])

    assert result.exit_code == 0
    assert "coffee" in result.output
    assert recorder.last.url.params["limit"] == "5"


def test_network_error_exits(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _use_bkper(monkeypatch, handler)

    result = runner.invoke(cli.app, ["user"])

    assert result.exit_code == 1
    assert "Network error" in result.output


def test_login_and_logout(monkeypatch, tmp_path):
    _use_local_auth(monkeypatch, tmp_path, Recorder(json={"access_token": "a", "expires_in": 3600}))

    result = runner.invoke(cli.app, ["login"], input="refresh-token\n")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "creds.json").exists()

    result = runner.invoke(cli.app, ["logout"])

    assert result.exit_code == 0
    assert not (tmp_path / "creds.json").exists()


def test_failed_login_does_not_keep_credentials(monkeypatch, tmp_path):
    _use_local_auth(monkeypatch, tmp_path, Recorder(400, json={"error": "invalid_grant"}))

    result = runner.invoke(cli.app, ["login"], input="bad-token\n")

    assert result.exit_code == 1
    assert "Authentication failed" in result.output
    assert not (tmp_path / "creds.json").exists()


def test_setup_writes_user_env(monkeypatch, tmp_path):
    env_path = tmp_path / ".env"
    monkeypatch.setattr(
        cli,
        "write_user_env_vars",
        lambda values: _write(env_path, values),
    )

    result = runner.invoke(cli.app, ["setup"], input="key-1\n\n\n")

    assert result.exit_code == 0
    assert env_path.read_text(encoding="utf-8") == "BKPER_API_KEY=key-1\n"


def _write(path, values):
    path.write_text("".join(f"{k}={v}\n" for k, v in values.items()), encoding="utf-8")
    return path


def test_book_with_empty_body_exits_with_error(monkeypatch):
    _use_bkper(monkeypatch, Recorder(200))

    result = runner.invoke(cli.app, ["book", "b1"])

    assert result.exit_code == 1
    assert "returned no data" in result.output
