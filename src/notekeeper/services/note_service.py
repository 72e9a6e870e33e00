"""Note service — business logic for note CRUD.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the store.

Every read, update and delete goes through NoteOwnershipGuard first:

    Start → Fetch → NotFound
                  → OwnershipCheck → Forbidden
                                   → Proceed

Create needs no guard. The owner is always the authenticated caller,
whatever the request body says.
"""

import enum
from typing import Optional

import structlog

from notekeeper.db.models import Note
from notekeeper.db.stores import NoteStore
from notekeeper.errors import ForbiddenError, NotFoundError, ValidationError

logger = structlog.get_logger()


class NoteOperation(str, enum.Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class NoteOwnershipGuard:
    """Only the owner of a note may read, update, or delete it."""

    def __init__(self, notes: NoteStore):
        self.notes = notes

    async def authorize(
        self, note_id: str, subject_id: str, operation: NoteOperation
    ) -> Note:
        note = await self.notes.find_by_id(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        if str(note.owner_id) != str(subject_id):
            logger.warning(
                "notes.access_denied",
                note_id=str(note_id),
                user_id=str(subject_id),
                operation=operation.value,
            )
            raise ForbiddenError()
        return note


class NoteService:
    """Business logic for a user's notes."""

    def __init__(self, notes: NoteStore, guard: Optional[NoteOwnershipGuard] = None):
        self.notes = notes
        self.guard = guard or NoteOwnershipGuard(notes)

    async def list_notes(self, owner_id: str) -> list[Note]:
        return await self.notes.list_by_owner(owner_id)

    async def get_note(self, note_id: str, user_id: str) -> Note:
        return await self.guard.authorize(note_id, user_id, NoteOperation.READ)

    async def create_note(self, owner_id: str, title: str, content: str) -> Note:
        note = await self.notes.create(owner_id=owner_id, title=title, content=content)
        logger.info("notes.created", note_id=str(note.id), user_id=str(owner_id))
        return note

    async def update_note(
        self,
        note_id: str,
        user_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Note:
        fields = {
            k: v for k, v in (("title", title), ("content", content)) if v is not None
        }
        if not fields:
            raise ValidationError(
                "At least one field (title or content) must be provided for update"
            )

        await self.guard.authorize(note_id, user_id, NoteOperation.UPDATE)
        note = await self.notes.update(note_id, fields)
        if note is None:
            # Deleted between the ownership check and the write
            raise NotFoundError("Note not found")
        logger.info("notes.updated", note_id=str(note_id), fields=sorted(fields))
        return note

    async def delete_note(self, note_id: str, user_id: str) -> None:
        await self.guard.authorize(note_id, user_id, NoteOperation.DELETE)
        if not await self.notes.delete(note_id):
            raise NotFoundError("Note not found")
        logger.info("notes.deleted", note_id=str(note_id))
