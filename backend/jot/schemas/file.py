from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MB = 1024 * 1024

# Per-type ceilings of the client uploaders.
UPLOAD_LIMITS: list[tuple[str, int, str]] = [
    ("image/", 4 * MB, "image"),
    ("application/pdf", 8 * MB, "PDF"),
    ("text/", 4 * MB, "text"),
]
DEFAULT_UPLOAD_LIMIT = 8 * MB


def upload_limit_for(mime_type: str) -> tuple[int, str]:
    lowered = mime_type.lower()
    for prefix, limit, label in UPLOAD_LIMITS:
        if lowered.startswith(prefix):
            return limit, label
    return DEFAULT_UPLOAD_LIMIT, "file"


class FileCreate(BaseModel):
    name: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=2048)
    key: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=255)
    size: int = Field(ge=0)
    folder: str | None = Field(default=None, max_length=200)

    @model_validator(mode="after")
    def enforce_upload_limit(self) -> "FileCreate":
        limit, label = upload_limit_for(self.type)
        if self.size > limit:
            raise ValueError(f"File exceeds the {limit // MB}MB limit for {label} uploads")
        return self


class FileMove(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_id: str | None = None
    folder: str | None = None


class FileOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    name: str
    url: str
    key: str
    type: str
    size: int
    folder: str
    created_at: datetime


class FileEnvelope(BaseModel):
    file: FileOut


class FileList(BaseModel):
    files: list[FileOut]
