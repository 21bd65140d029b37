"""Pydantic schemas for accounts and tokens."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from notekeep.stores.credentials import Identity


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    email: str
    password: str


class ValidateTokenRequest(BaseModel):
    token: str


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserRead":
        return cls(id=identity.id, email=identity.login, name=identity.display_name)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead


class TokenValidation(BaseModel):
    valid: bool
    user: Optional[UserRead] = None
