"""Pydantic schemas for notes.

Learn: Separate schemas for create/update/read keeps the API clean.
- NoteCreate: what you POST to create a note
- NoteUpdate: what you PUT/PATCH — only fields actually sent are applied
- NoteRead: what the API returns

Input fields are typed loosely. Every content rule (types, non-empty
title/content, category default) lives in the repository, so a null or
mistyped value gets the same 400 {field, message} as an empty one.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    title: Any = Field(default="", description="Non-empty string")
    content: Any = Field(default="", description="Non-empty string")
    category: Any = Field(default=None, description="Defaults to 'General'")
    tags: Any = Field(default=None, description="List of strings")


class NoteUpdate(BaseModel):
    """Partial update. Use model_dump(exclude_unset=True) to get the changes."""
    title: Any = None
    content: Any = None
    category: Any = None
    tags: Any = None


class NoteRead(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    category: str
    tags: list[str] = Field(default_factory=list)
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
