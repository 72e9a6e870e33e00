"""Persistence interfaces for users and notes.

Learn: Services depend on the abstract UserStore / NoteStore, never on
a session. The SQL implementations open one short session per call from
the shared session factory, so a single store instance can be built at
start-up and used by every request. Tests swap in in-memory stores.

Ids cross this boundary as strings. A string that is not a valid UUID
simply matches nothing.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notekeeper.db.models import Note, User
from notekeeper.errors import DuplicateIdentityError


def parse_id(value) -> Optional[uuid.UUID]:
    """Coerce an opaque id to a UUID, or None if it cannot be one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


class UserStore(ABC):
    """Credential store."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def create(self, email: str, password_hash: str) -> User:
        """Insert a user. Raises DuplicateIdentityError if the email is taken."""


class NoteStore(ABC):
    """Resource store for notes. Does no ownership checks of its own."""

    @abstractmethod
    async def find_by_id(self, note_id: str) -> Optional[Note]: ...

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Note]: ...

    @abstractmethod
    async def create(self, owner_id: str, title: str, content: str) -> Note: ...

    @abstractmethod
    async def update(self, note_id: str, fields: dict) -> Optional[Note]: ...

    @abstractmethod
    async def delete(self, note_id: str) -> bool: ...


class SqlUserStore(UserStore):
    """UserStore backed by PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalars().first()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        uid = parse_id(user_id)
        if uid is None:
            return None
        async with self.session_factory() as db:
            return await db.get(User, uid)

    async def create(self, email: str, password_hash: str) -> User:
        async with self.session_factory() as db:
            user = User(email=email, password_hash=password_hash)
            db.add(user)
            try:
                await db.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration
                await db.rollback()
                raise DuplicateIdentityError()
            await db.refresh(user)
            return user


class SqlNoteStore(NoteStore):
    """NoteStore backed by PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_id(self, note_id: str) -> Optional[Note]:
        nid = parse_id(note_id)
        if nid is None:
            return None
        async with self.session_factory() as db:
            return await db.get(Note, nid)

    async def list_by_owner(self, owner_id: str) -> list[Note]:
        oid = parse_id(owner_id)
        if oid is None:
            return []
        async with self.session_factory() as db:
            result = await db.execute(
                select(Note)
                .where(Note.owner_id == oid)
                .order_by(Note.created_at.desc())
            )
            return list(result.scalars().all())

    async def create(self, owner_id: str, title: str, content: str) -> Note:
        async with self.session_factory() as db:
            note = Note(owner_id=parse_id(owner_id), title=title, content=content)
            db.add(note)
            await db.commit()
            await db.refresh(note)
            return note

    async def update(self, note_id: str, fields: dict) -> Optional[Note]:
        nid = parse_id(note_id)
        if nid is None:
            return None
        async with self.session_factory() as db:
            note = await db.get(Note, nid)
            if note is None:
                return None
            for key in ("title", "content"):
                if key in fields:
                    setattr(note, key, fields[key])
            await db.commit()
            await db.refresh(note)
            return note

    async def delete(self, note_id: str) -> bool:
        nid = parse_id(note_id)
        if nid is None:
            return False
        async with self.session_factory() as db:
            note = await db.get(Note, nid)
            if note is None:
                return False
            await db.delete(note)
            await db.commit()
            return True
