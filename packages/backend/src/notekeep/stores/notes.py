"""Note Store — generic, owner-agnostic persistence for notes.

Learn: The store knows nothing about ownership. Filters are plain
equality mappings ({"id": ..., "owner_id": ...}) and every single-record
operation applies its whole filter inside one SQL statement, so a check
like "this id AND this owner" cannot be split across two round trips.

Each operation commits on its own: one statement, one unit of work.
"""

from typing import Any, Mapping, Optional, Protocol, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.db.models import Note

SortSpec = Sequence[tuple[str, str]]


class NoteStore(Protocol):
    async def insert(self, record: Mapping[str, Any]) -> Note:
        ...

    async def find_one(self, filters: Mapping[str, Any]) -> Optional[Note]:
        ...

    async def find_many(
        self, filters: Mapping[str, Any], sort: SortSpec = ()
    ) -> list[Note]:
        ...

    async def update_one(
        self, filters: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> Optional[Note]:
        ...

    async def delete_one(self, filters: Mapping[str, Any]) -> bool:
        ...


def _column(name: str):
    if name not in Note.__table__.columns:
        raise ValueError(f"Unknown note field: {name!r}")
    return getattr(Note, name)


def _where(filters: Mapping[str, Any]) -> list:
    if not filters:
        raise ValueError("Refusing to run a note query without a filter")
    return [_column(name) == value for name, value in filters.items()]


def _order_by(sort: SortSpec) -> list:
    clauses = []
    for name, direction in sort:
        column = _column(name)
        if direction == "desc":
            clauses.append(column.desc())
        elif direction == "asc":
            clauses.append(column.asc())
        else:
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    return clauses


class SqlNoteStore:
    """NoteStore backed by the notes table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, record: Mapping[str, Any]) -> Note:
        note = Note(**record)
        self.db.add(note)
        await self.db.commit()
        return note

    async def find_one(self, filters: Mapping[str, Any]) -> Optional[Note]:
        result = await self.db.execute(
            select(Note)
            .where(*_where(filters))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def find_many(
        self, filters: Mapping[str, Any], sort: SortSpec = ()
    ) -> list[Note]:
        result = await self.db.execute(
            select(Note)
            .where(*_where(filters))
            .order_by(*_order_by(sort))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update_one(
        self, filters: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> Optional[Note]:
        """Apply `patch` to the record matching `filters`; None if nothing matched."""
        for name in patch:
            _column(name)

        result = await self.db.scalars(
            update(Note)
            .where(*_where(filters))
            .values(**patch)
            .returning(Note)
            .execution_options(populate_existing=True, synchronize_session=False)
        )
        # The updated row comes back from the UPDATE itself
        note = result.first()
        await self.db.commit()
        return note

    async def delete_one(self, filters: Mapping[str, Any]) -> bool:
        result = await self.db.execute(
            delete(Note)
            .where(*_where(filters))
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0
