from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FolderCreate(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    color: str | None = Field(default=None, max_length=32)


class FolderUpdate(FolderCreate):
    pass


class FolderOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    name: str
    color: str
    created_at: datetime


class FolderMessageEnvelope(BaseModel):
    message: str
    folder: FolderOut


class FolderList(BaseModel):
    folders: list[FolderOut]
