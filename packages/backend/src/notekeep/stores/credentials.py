"""Credential Store — account lookup by id and by login.

Learn: The rest of the app only sees the CredentialStore protocol and the
immutable Identity value. SqlCredentialStore is the adapter over the
users table; swapping it for another backend does not touch the gate.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.db.models import User


@dataclass(frozen=True)
class Identity:
    """An authenticated account. Never mutated once loaded."""

    id: uuid.UUID
    login: str
    display_name: str
    password_hash: str = field(repr=False)

    @classmethod
    def from_row(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            login=user.email,
            display_name=user.name,
            password_hash=user.password_hash,
        )


class LoginTakenError(Exception):
    """Raised when registering a login identifier that already exists."""


class CredentialStore(Protocol):
    async def find_by_id(self, identity_id: str) -> Optional[Identity]:
        ...

    async def find_by_login(self, login: str) -> Optional[Identity]:
        ...


def normalize_login(login: str) -> str:
    return login.strip().lower()


class SqlCredentialStore:
    """CredentialStore backed by the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, identity_id: str) -> Optional[Identity]:
        try:
            key = uuid.UUID(str(identity_id))
        except ValueError:
            return None
        user = await self.db.get(User, key)
        return Identity.from_row(user) if user else None

    async def find_by_login(self, login: str) -> Optional[Identity]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_login(login))
        )
        user = result.scalars().first()
        return Identity.from_row(user) if user else None

    async def create(
        self, login: str, display_name: str, password_hash: str
    ) -> Identity:
        """Insert a new account. Raises LoginTakenError on a duplicate login."""
        email = normalize_login(login)
        if await self.find_by_login(email):
            raise LoginTakenError(f"Login {email!r} is already registered")

        user = User(email=email, name=display_name.strip(), password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise LoginTakenError(f"Login {email!r} is already registered")
        return Identity.from_row(user)
