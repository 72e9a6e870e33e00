"""CLI tests — commands run against the in-process app.

Learn: _client() is patched to return an httpx client on the ASGI
transport, so click commands exercise the real routes and stores
without a server.
"""

import pytest
from click.testing import CliRunner
from httpx import ASGITransport, AsyncClient

from notekeeper.cli import main as cli


@pytest.fixture()
def runner(app, monkeypatch):
    def _client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test", headers=headers
        )

    monkeypatch.setattr(cli, "_client", _client)
    monkeypatch.delenv("NOTEKEEPER_TOKEN", raising=False)
    return CliRunner()


def _register(runner, email="cli@example.com", password="password_123"):
    result = runner.invoke(
        cli.main, ["register", email], input=f"{password}\n{password}\n"
    )
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1]


def test_gen_secret():
    result = CliRunner().invoke(cli.main, ["gen-secret"])
    assert result.exit_code == 0
    assert len(result.output.strip()) >= 32


def test_register_and_login_print_tokens(runner):
    token = _register(runner)
    assert token.count(".") == 2

    result = runner.invoke(
        cli.main, ["login", "cli@example.com", "--password", "password_123"]
    )
    assert result.exit_code == 0
    assert result.output.strip().splitlines()[-1].count(".") == 2


def test_login_bad_password(runner):
    _register(runner)
    result = runner.invoke(cli.main, ["login", "cli@example.com", "--password", "nope"])
    assert result.exit_code == 1
    assert "Invalid email or password" in result.output


def test_notes_roundtrip(runner, note_store):
    token = _register(runner)

    result = runner.invoke(cli.main, ["notes", "add", "Groceries", "milk", "--token", token])
    assert result.exit_code == 0, result.output
    note_id = str(next(iter(note_store.notes)))

    result = runner.invoke(cli.main, ["notes", "list", "--token", token])
    assert result.exit_code == 0
    assert "Groceries" in result.output

    result = runner.invoke(
        cli.main, ["notes", "edit", note_id, "--content", "bread", "--token", token]
    )
    assert result.exit_code == 0

    result = runner.invoke(cli.main, ["notes", "show", note_id, "--token", token])
    assert result.exit_code == 0
    assert "bread" in result.output

    result = runner.invoke(cli.main, ["notes", "rm", note_id, "--token", token])
    assert result.exit_code == 0
    assert note_store.notes == {}


def test_token_from_env(runner, monkeypatch):
    token = _register(runner)
    monkeypatch.setenv("NOTEKEEPER_TOKEN", token)
    result = runner.invoke(cli.main, ["notes", "list"])
    assert result.exit_code == 0
    assert "No notes yet." in result.output


def test_notes_without_token(runner):
    result = runner.invoke(cli.main, ["notes", "list"])
    assert result.exit_code == 1
    assert "--token required" in result.output


def test_edit_needs_a_field(runner):
    result = runner.invoke(cli.main, ["notes", "edit", "abc", "--token", "t"])
    assert result.exit_code == 2
