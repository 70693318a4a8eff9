"""API schemas for folders."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notive.domain.entities import Folder


class FolderCreateRequest(BaseModel):
    """Body of POST /folders."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, description="Folder name (required)")
    icon: str | None = None
    parent_id: int | None = Field(default=None, alias="parentId")


class FolderUpdateRequest(BaseModel):
    """Body of PUT /folders/{id}. Omitted or null fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    icon: str | None = None
    parent_id: int | None = Field(default=None, alias="parentId")


class FolderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: int = Field(alias="userId")
    name: str
    icon: str | None = None
    parent_id: int | None = Field(default=None, alias="parentId")
    is_deleted: bool = Field(default=False, alias="isDeleted")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_entity(cls, folder: Folder) -> "FolderResponse":
        return cls(
            id=folder.id,
            user_id=folder.user_id,
            name=folder.name,
            icon=folder.icon,
            parent_id=folder.parent_id,
            is_deleted=folder.is_deleted,
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )


class FolderListResponse(BaseModel):
    success: bool = True
    folders: list[FolderResponse]


class FolderEnvelope(BaseModel):
    success: bool = True
    folder: FolderResponse
