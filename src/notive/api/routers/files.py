"""Note and upload endpoints. All routes require a valid bearer token.

Paths are spelled out in full because ``/upload`` sits next to ``/files`` at the root.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from notive.api.dependencies import get_app_settings, get_current_user_id, get_file_service
from notive.api.schemas.auth import SuccessResponse
from notive.api.schemas.files import (
    FileEnvelope,
    FileListResponse,
    FileResponse,
    FileUpdateRequest,
    NoteCreateRequest,
)
from notive.application.services.file_service import FileService
from notive.config import Settings
from notive.domain.entities import ApiErrorCode
from notive.domain.exceptions import ValidationException

router = APIRouter()


def _form_int(value: str | None, field: str) -> int | None:
    # Multipart fields arrive as text; an empty field means "not given"
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValidationException(
            f"{field} must be an integer", code=ApiErrorCode.INVALID_REQUEST
        ) from e


@router.get("/files", response_model=FileListResponse)
async def list_files(
    folder_id: int | None = Query(default=None, alias="folderId"),
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
) -> FileListResponse:
    """List the caller's notes and uploads, oldest first, optionally of one folder."""
    items = await files.list_files(user_id, folder_id=folder_id)
    return FileListResponse(files=[FileResponse.from_entity(f) for f in items])


@router.post("/files", response_model=FileEnvelope, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreateRequest,
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
) -> FileEnvelope:
    note = await files.create_note(
        user_id, body.name, body.type, content=body.content, folder_id=body.folder_id
    )
    return FileEnvelope(file=FileResponse.from_entity(note))


@router.get("/files/{file_id}", response_model=FileEnvelope)
async def get_file(
    file_id: int,
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
) -> FileEnvelope:
    return FileEnvelope(file=FileResponse.from_entity(await files.get_file(user_id, file_id)))


@router.put("/files/{file_id}", response_model=FileEnvelope)
async def update_file(
    file_id: int,
    body: FileUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
) -> FileEnvelope:
    file = await files.update_file(
        user_id, file_id, name=body.name, content=body.content, folder_id=body.folder_id
    )
    return FileEnvelope(file=FileResponse.from_entity(file))


@router.delete("/files/{file_id}", response_model=SuccessResponse)
async def delete_file(
    file_id: int,
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
) -> SuccessResponse:
    await files.delete_file(user_id, file_id)
    return SuccessResponse()


# Hey future me - we read at most max_upload_bytes + 1 bytes. One byte over the limit is
# enough for the service to reject the upload, and a 2 GB video never ends up in memory.
@router.post("/upload", response_model=FileEnvelope, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile | None = File(default=None),
    folder_id: str | None = Form(default=None, alias="folderId"),
    name: str | None = Form(default=None),
    type: str | None = Form(default=None),
    user_id: int = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_app_settings),
) -> FileEnvelope:
    """Upload an image, video or document as multipart field ``file``."""
    data = None
    if file is not None:
        data = await file.read(settings.storage.max_upload_bytes + 1)
    stored = await files.upload(
        user_id,
        data,
        filename=file.filename if file is not None else None,
        mime_type=file.content_type if file is not None else None,
        name=name,
        type=type,
        folder_id=_form_int(folder_id, "folderId"),
    )
    return FileEnvelope(file=FileResponse.from_entity(stored))
