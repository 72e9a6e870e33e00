"""Pydantic schemas for notes.

Learn: NoteCreate has no owner_id. Unknown fields in the request body
are ignored, so a client cannot pick the owner of a new note.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value):
        return _not_blank(value)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value):
        return _not_blank(value)


class NoteRead(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    owner_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
