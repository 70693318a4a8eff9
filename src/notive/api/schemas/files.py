"""API schemas for notes and uploaded files."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from notive.domain.entities import NoteFile


class NoteCreateRequest(BaseModel):
    """Body of POST /files. ``content`` may be a list, an object, or a (JSON) string."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    type: str | None = None
    content: Any = None
    folder_id: int | None = Field(default=None, alias="folderId")


class FileUpdateRequest(BaseModel):
    """Body of PUT /files/{id}. Omitted or null fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    content: Any = None
    folder_id: int | None = Field(default=None, alias="folderId")


class FileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(alias="userId")
    folder_id: int | None = Field(default=None, alias="folderId")
    name: str
    type: str
    content: list[Any] | None = None
    file_path: str | None = Field(default=None, alias="filePath")
    mime_type: str | None = Field(default=None, alias="mimeType")
    size: int | None = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_entity(cls, file: NoteFile) -> "FileResponse":
        return cls(
            id=file.id,
            user_id=file.user_id,
            folder_id=file.folder_id,
            name=file.name,
            type=file.type.value,
            content=file.content,
            file_path=file.file_path,
            mime_type=file.mime_type,
            size=file.size,
            created_at=file.created_at,
            updated_at=file.updated_at,
        )


class FileListResponse(BaseModel):
    success: bool = True
    files: list[FileResponse]


class FileEnvelope(BaseModel):
    success: bool = True
    file: FileResponse
