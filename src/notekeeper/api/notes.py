"""Note API routes.

Learn: Authentication is applied to this whole router in
api/__init__.py. Handlers still take the CurrentIdentity (FastAPI
caches the dependency, so the token is verified once) because the
owner of every note comes from it, never from the request body.
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from notekeeper.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_note_service,
)
from notekeeper.errors import ForbiddenError, NotFoundError, ValidationError
from notekeeper.schemas.note import NoteCreate, NoteRead, NoteUpdate
from notekeeper.services.note_service import NoteService

router = APIRouter(prefix="/notes")


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ForbiddenError):
        return HTTPException(status_code=403, detail=str(e))
    return HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=list[NoteRead])
async def list_notes(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    """List the caller's notes, newest first."""
    return await svc.list_notes(identity.user_id)


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    body: NoteCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    return await svc.create_note(
        owner_id=identity.user_id, title=body.title, content=body.content
    )


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    try:
        return await svc.get_note(note_id, identity.user_id)
    except (NotFoundError, ForbiddenError) as e:
        raise _http_error(e)


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    try:
        return await svc.update_note(
            note_id, identity.user_id, title=body.title, content=body.content
        )
    except (NotFoundError, ForbiddenError, ValidationError) as e:
        raise _http_error(e)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: NoteService = Depends(get_note_service),
):
    try:
        await svc.delete_note(note_id, identity.user_id)
    except (NotFoundError, ForbiddenError) as e:
        raise _http_error(e)
    return Response(status_code=204)
