"""Ownership-scoped note repository.

Learn: This is the only way the app reaches notes. Every method takes the
resolved Identity and folds its id into the store filter, so there is no
call that accepts a note id on its own.

"Not found" and "owned by someone else" raise the same NoteNotFoundError
with the same message, so a caller cannot probe for other users' note ids.
"""

import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

import structlog

from notekeep.db.models import Note, utcnow
from notekeep.stores.credentials import Identity
from notekeep.stores.notes import NoteStore

logger = structlog.get_logger()

DEFAULT_CATEGORY = "General"
MAX_TITLE_LENGTH = 500
MAX_CATEGORY_LENGTH = 100
UPDATABLE_FIELDS = ("title", "content", "category", "tags")
MIN_TICK = timedelta(microseconds=1)


class NoteNotFoundError(Exception):
    """Raised when a note does not exist or is not owned by the caller."""

    def __init__(self):
        super().__init__("Note not found")


class NoteValidationError(Exception):
    """Raised when note input is invalid. `field` names the offending field."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def _clean_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise NoteValidationError("title", "Title must not be empty")
    title = value.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise NoteValidationError(
            "title", f"Title must be at most {MAX_TITLE_LENGTH} characters"
        )
    return title


def _clean_content(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise NoteValidationError("content", "Content must not be empty")
    return value


def _clean_category(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise NoteValidationError("category", "Category must not be empty")
    category = value.strip()
    if len(category) > MAX_CATEGORY_LENGTH:
        raise NoteValidationError(
            "category", f"Category must be at most {MAX_CATEGORY_LENGTH} characters"
        )
    return category


def _clean_tags(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(t, str) for t in value
    ):
        raise NoteValidationError("tags", "Tags must be a list of strings")
    # Order and duplicates are kept as given
    return [t.strip() for t in value if t.strip()]


_CLEANERS = {
    "title": _clean_title,
    "content": _clean_content,
    "category": _clean_category,
    "tags": _clean_tags,
}


def _parse_note_id(note_id: Any) -> uuid.UUID:
    if isinstance(note_id, uuid.UUID):
        return note_id
    try:
        return uuid.UUID(str(note_id))
    except ValueError:
        raise NoteNotFoundError()


class OwnedNoteRepository:
    """Note CRUD bound to the calling identity."""

    def __init__(self, store: NoteStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def _owned(self, identity: Identity, note_id: Any) -> dict:
        return {"id": _parse_note_id(note_id), "owner_id": identity.id}

    async def list(self, identity: Identity) -> list[Note]:
        """All of the caller's notes, most recently updated first."""
        return await self.store.find_many(
            {"owner_id": identity.id},
            sort=[("updated_at", "desc"), ("created_at", "desc")],
        )

    async def get(self, identity: Identity, note_id: Any) -> Note:
        note = await self.store.find_one(self._owned(identity, note_id))
        if note is None:
            raise NoteNotFoundError()
        return note

    async def create(
        self,
        identity: Identity,
        title: Any,
        content: Any,
        category: Optional[Any] = None,
        tags: Optional[Any] = None,
    ) -> Note:
        """Validate and store a new note owned by `identity`."""
        if category is None or (isinstance(category, str) and not category.strip()):
            category = DEFAULT_CATEGORY
        record = {
            "title": _clean_title(title),
            "content": _clean_content(content),
            "category": _clean_category(category),
            "tags": _clean_tags(tags) if tags is not None else [],
        }

        now = self.clock()
        note = await self.store.insert(
            {**record, "owner_id": identity.id, "created_at": now, "updated_at": now}
        )
        logger.info("note.created", note_id=str(note.id), owner_id=str(identity.id))
        return note

    async def update(
        self, identity: Identity, note_id: Any, changes: Mapping[str, Any]
    ) -> Note:
        """Merge the fields present in `changes` into the caller's note.

        Absent fields are left alone. updated_at moves forward even when
        nothing else changes.
        """
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise NoteValidationError(unknown[0], "Field cannot be updated")

        patch = {name: _CLEANERS[name](value) for name, value in changes.items()}

        current = await self.store.find_one(self._owned(identity, note_id))
        if current is None:
            raise NoteNotFoundError()
        # updated_at strictly increases even if the clock steps back
        patch["updated_at"] = max(self.clock(), current.updated_at + MIN_TICK)

        note = await self.store.update_one(self._owned(identity, note_id), patch)
        if note is None:
            raise NoteNotFoundError()
        logger.info(
            "note.updated",
            note_id=str(note.id),
            fields=sorted(changes),
        )
        return note

    async def delete(self, identity: Identity, note_id: Any) -> None:
        deleted = await self.store.delete_one(self._owned(identity, note_id))
        if not deleted:
            raise NoteNotFoundError()
        logger.info("note.deleted", note_id=str(note_id))
