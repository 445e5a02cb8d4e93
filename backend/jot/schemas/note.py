from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class NoteCreate(_CamelModel):
    title: str | None = Field(default=None, max_length=500)
    content: str | None = None
    tags: list[str] | None = None
    folder: str | None = Field(default=None, max_length=200)


class NoteUpdate(_CamelModel):
    title: str | None = Field(default=None, max_length=500)
    content: str | None = None
    tags: list[str] | None = None
    folder: str | None = Field(default=None, max_length=200)
    is_pinned: bool | None = None

    @field_validator("title", "folder")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class NoteOut(_CamelModel):
    id: str
    user_id: str
    title: str
    content: str
    tags: list[str]
    folder: str
    is_pinned: bool
    created_at: datetime
    updated_at: datetime


class NoteEnvelope(BaseModel):
    note: NoteOut


class NoteMessageEnvelope(NoteEnvelope):
    message: str


class NoteList(BaseModel):
    notes: list[NoteOut]
