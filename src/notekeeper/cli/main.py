"""Notekeeper CLI — run the server and manage notes over the API.

Usage:
    notekeeper serve                             # Run the API with uvicorn
    notekeeper gen-secret                        # Print a new signing secret
    notekeeper register me@example.com           # Create an account, print token
    notekeeper login me@example.com              # Print a fresh token
    notekeeper notes list                        # Your notes (needs a token)
    notekeeper notes add "Title" "Body"          # Create a note
    notekeeper notes show <id>                   # Show one note
    notekeeper notes edit <id> --title "New"     # Update title and/or content
    notekeeper notes rm <id>                     # Delete a note

The token comes from --token or NOTEKEEPER_TOKEN.
"""

from __future__ import annotations

import asyncio
import json
import os
import secrets
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("NOTEKEEPER_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Notekeeper backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    return asyncio.run(coro)


def _require_token(token: Optional[str]) -> str:
    tok = token or os.environ.get("NOTEKEEPER_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set NOTEKEEPER_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> None:
    """Exit with the API's error detail on a non-2xx response."""
    if r.is_success:
        return
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="notekeeper")
def main():
    """Notekeeper — personal notes API."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: NOTEKEEPER_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: NOTEKEEPER_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from notekeeper.config import Settings

    settings = Settings()
    uvicorn.run(
        "notekeeper.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("gen-secret")
def gen_secret():
    """Print a random value for NOTEKEEPER_JWT_SECRET."""
    click.echo(secrets.token_urlsafe(32))


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
def register(email: str, password: str):
    """Create an account and print its token."""
    _run(_auth_impl("/api/auth/register", email, password))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a fresh token."""
    _run(_auth_impl("/api/auth/login", email, password))


async def _auth_impl(path: str, email: str, password: str):
    async with _client() as c:
        r = await c.post(path, json={"email": email, "password": password})
        _check(r)
        data = r.json()
    click.secho(f"Authenticated as {data['user']['email']} ({data['user']['id']})",
                fg="green", err=True)
    click.echo(data["token"])


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

_token_option = click.option("--token", help="Bearer token (or set NOTEKEEPER_TOKEN)")


@main.group()
def notes():
    """Manage your notes."""


@notes.command("list")
@_token_option
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_notes(token: Optional[str], as_json: bool):
    """List your notes, newest first."""
    _run(_list_impl(_require_token(token), as_json))


async def _list_impl(token: str, as_json: bool):
    async with _client(token) as c:
        r = await c.get("/api/notes")
        _check(r)
        rows = r.json()

    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No notes yet.")
        return
    _print_table(rows, [
        ("ID", "id", 36),
        ("TITLE", "title", 40),
        ("UPDATED", "updated_at", 19),
    ])


@notes.command("add")
@click.argument("title")
@click.argument("content")
@_token_option
def add_note(title: str, content: str, token: Optional[str]):
    """Create a note."""
    _run(_add_impl(_require_token(token), title, content))


async def _add_impl(token: str, title: str, content: str):
    async with _client(token) as c:
        r = await c.post("/api/notes", json={"title": title, "content": content})
        _check(r)
        note = r.json()
    click.secho(f"Note {note['id']} created", fg="green")


@notes.command("show")
@click.argument("note_id")
@_token_option
def show_note(note_id: str, token: Optional[str]):
    """Show one note."""
    _run(_show_impl(_require_token(token), note_id))


async def _show_impl(token: str, note_id: str):
    async with _client(token) as c:
        r = await c.get(f"/api/notes/{note_id}")
        _check(r)
        note = r.json()
    click.secho(note["title"], bold=True)
    click.echo(note["content"])


@notes.command("edit")
@click.argument("note_id")
@click.option("--title", help="New title")
@click.option("--content", help="New content")
@_token_option
def edit_note(note_id: str, title: Optional[str], content: Optional[str],
              token: Optional[str]):
    """Update a note's title and/or content."""
    if title is None and content is None:
        raise click.UsageError("Give --title and/or --content")
    _run(_edit_impl(_require_token(token), note_id, title, content))


async def _edit_impl(token: str, note_id: str, title: Optional[str],
                     content: Optional[str]):
    body = {k: v for k, v in (("title", title), ("content", content)) if v is not None}
    async with _client(token) as c:
        r = await c.put(f"/api/notes/{note_id}", json=body)
        _check(r)
    click.secho(f"Note {note_id} updated", fg="green")


@notes.command("rm")
@click.argument("note_id")
@_token_option
def remove_note(note_id: str, token: Optional[str]):
    """Delete a note."""
    _run(_rm_impl(_require_token(token), note_id))


async def _rm_impl(token: str, note_id: str):
    async with _client(token) as c:
        r = await c.delete(f"/api/notes/{note_id}")
        _check(r)
    click.secho(f"Note {note_id} deleted", fg="green")


if __name__ == "__main__":
    main()
