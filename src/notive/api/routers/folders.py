"""Folder CRUD endpoints. All routes require a valid bearer token."""

from fastapi import APIRouter, Depends, Query, status

from notive.api.dependencies import get_current_user_id, get_folder_service
from notive.api.schemas.auth import SuccessResponse
from notive.api.schemas.folders import (
    FolderCreateRequest,
    FolderEnvelope,
    FolderListResponse,
    FolderResponse,
    FolderUpdateRequest,
)
from notive.application.services.folder_service import FolderService

router = APIRouter()


@router.get("", response_model=FolderListResponse)
async def list_folders(
    parent_id: int | None = Query(default=None, alias="parentId"),
    user_id: int = Depends(get_current_user_id),
    folders: FolderService = Depends(get_folder_service),
) -> FolderListResponse:
    """List the caller's non-deleted folders, optionally only children of ``parentId``."""
    items = await folders.list_folders(user_id, parent_id=parent_id)
    return FolderListResponse(folders=[FolderResponse.from_entity(f) for f in items])


@router.post("", response_model=FolderEnvelope, status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: FolderCreateRequest,
    user_id: int = Depends(get_current_user_id),
    folders: FolderService = Depends(get_folder_service),
) -> FolderEnvelope:
    folder = await folders.create_folder(
        user_id, body.name, icon=body.icon, parent_id=body.parent_id
    )
    return FolderEnvelope(folder=FolderResponse.from_entity(folder))


@router.put("/{folder_id}", response_model=FolderEnvelope)
async def update_folder(
    folder_id: int,
    body: FolderUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    folders: FolderService = Depends(get_folder_service),
) -> FolderEnvelope:
    folder = await folders.update_folder(
        user_id, folder_id, name=body.name, icon=body.icon, parent_id=body.parent_id
    )
    return FolderEnvelope(folder=FolderResponse.from_entity(folder))


@router.delete("/{folder_id}", response_model=SuccessResponse)
async def delete_folder(
    folder_id: int,
    user_id: int = Depends(get_current_user_id),
    folders: FolderService = Depends(get_folder_service),
) -> SuccessResponse:
    await folders.delete_folder(user_id, folder_id)
    return SuccessResponse()
