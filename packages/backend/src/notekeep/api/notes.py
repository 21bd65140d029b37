"""Note API routes.

Learn: Routes just translate HTTP to repository calls. The identity
always comes from the token (get_current_identity), never from the
request body or path, so a route cannot be pointed at another user's
notes.

Key patterns:
- PUT and PATCH both do a partial update (only fields sent are applied)
- 404 for both "no such note" and "not yours"
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth.dependencies import get_current_identity
from notekeep.db.engine import get_db
from notekeep.schemas.note import NoteCreate, NoteRead, NoteUpdate
from notekeep.services.note_repository import (
    NoteNotFoundError,
    NoteValidationError,
    OwnedNoteRepository,
)
from notekeep.stores.credentials import Identity
from notekeep.stores.notes import SqlNoteStore

router = APIRouter(prefix="/notes")


def _note_repo(db: AsyncSession = Depends(get_db)) -> OwnedNoteRepository:
    return OwnedNoteRepository(SqlNoteStore(db))


def _invalid(e: NoteValidationError) -> HTTPException:
    return HTTPException(
        status_code=400, detail={"field": e.field, "message": e.message}
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Note not found")


@router.get("", response_model=list[NoteRead])
async def list_notes(
    identity: Identity = Depends(get_current_identity),
    repo: OwnedNoteRepository = Depends(_note_repo),
):
    """List the caller's notes, most recently updated first."""
    return await repo.list(identity)


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: OwnedNoteRepository = Depends(_note_repo),
):
    try:
        return await repo.get(identity, note_id)
    except NoteNotFoundError:
        raise _not_found()


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    body: NoteCreate,
    identity: Identity = Depends(get_current_identity),
    repo: OwnedNoteRepository = Depends(_note_repo),
):
    """Create a note owned by the caller."""
    try:
        return await repo.create(
            identity,
            title=body.title,
            content=body.content,
            category=body.category,
            tags=body.tags,
        )
    except NoteValidationError as e:
        raise _invalid(e)


@router.put("/{note_id}", response_model=NoteRead)
@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    identity: Identity = Depends(get_current_identity),
    repo: OwnedNoteRepository = Depends(_note_repo),
):
    """Partially update a note (title, content, category, tags)."""
    try:
        return await repo.update(identity, note_id, body.model_dump(exclude_unset=True))
    except NoteNotFoundError:
        raise _not_found()
    except NoteValidationError as e:
        raise _invalid(e)


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: OwnedNoteRepository = Depends(_note_repo),
):
    try:
        await repo.delete(identity, note_id)
    except NoteNotFoundError:
        raise _not_found()
    return {"deleted": True}
