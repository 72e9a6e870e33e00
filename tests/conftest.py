"""Test fixtures — an app wired to in-memory stores.

Learn: create_app() takes a ready Services container, so tests never
touch Postgres or Redis. The in-memory stores implement the same
UserStore / NoteStore interfaces as the SQL ones and return transient
ORM objects, so schemas and services see exactly the same shapes.

bcrypt runs with 4 rounds (its minimum) to keep the suite fast.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notekeeper.config import Settings
from notekeeper.container import build_services
from notekeeper.db.models import Note, User, new_uuid, utcnow
from notekeeper.db.stores import NoteStore, UserStore, parse_id
from notekeeper.errors import DuplicateIdentityError
from notekeeper.main import create_app

TEST_SECRET = "test-secret-key-0123456789-abcdefghij"


class InMemoryUserStore(UserStore):
    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}
        self.create_calls = 0

    async def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_id(self, user_id):
        return self.users.get(parse_id(user_id))

    async def create(self, email, password_hash):
        self.create_calls += 1
        # Acts as the unique constraint on users.email
        if any(u.email == email for u in self.users.values()):
            raise DuplicateIdentityError()
        now = utcnow()
        user = User(
            id=new_uuid(),
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user


class InMemoryNoteStore(NoteStore):
    def __init__(self):
        self.notes: dict[uuid.UUID, Note] = {}

    async def find_by_id(self, note_id):
        return self.notes.get(parse_id(note_id))

    async def list_by_owner(self, owner_id):
        oid = parse_id(owner_id)
        # dicts keep insertion order; newest first
        return [n for n in reversed(list(self.notes.values())) if n.owner_id == oid]

    async def create(self, owner_id, title, content):
        now = utcnow()
        note = Note(
            id=new_uuid(),
            owner_id=parse_id(owner_id),
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.notes[note.id] = note
        return note

    async def update(self, note_id, fields):
        note = await self.find_by_id(note_id)
        if note is None:
            return None
        for key in ("title", "content"):
            if key in fields:
                setattr(note, key, fields[key])
        note.updated_at = utcnow()
        return note

    async def delete(self, note_id):
        return self.notes.pop(parse_id(note_id), None) is not None


@pytest.fixture()
def settings():
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture()
def user_store():
    return InMemoryUserStore()


@pytest.fixture()
def note_store():
    return InMemoryNoteStore()


@pytest.fixture()
def services(settings, user_store, note_store):
    return build_services(settings, users=user_store, notes=note_store)


@pytest.fixture()
def app(settings, services):
    return create_app(settings, services)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the app in-process (no lifespan, no Redis)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register(client):
    """Register a fresh user; returns (user_json, auth_headers)."""

    async def _register(email=None, password="password_123"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/auth/register", json={"email": email, "password": password}
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register
