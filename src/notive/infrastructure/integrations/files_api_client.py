"""Client for the note and upload endpoints."""

from datetime import datetime
from typing import Any

from notive.domain.entities import FileType, NoteFile
from notive.infrastructure.integrations.api_errors import json_or_raise
from notive.infrastructure.integrations.session_client import SessionClient


def _file(data: dict[str, Any]) -> NoteFile:
    return NoteFile(
        id=int(data["id"]),
        user_id=int(data["userId"]),
        name=str(data["name"]),
        type=FileType(data["type"]),
        folder_id=data.get("folderId"),
        content=data.get("content"),
        file_path=data.get("filePath"),
        mime_type=data.get("mimeType"),
        size=data.get("size"),
        created_at=datetime.fromisoformat(data["createdAt"]),
        updated_at=datetime.fromisoformat(data["updatedAt"]),
    )


class FilesApiClient:
    """Notes and uploads through the session client.

    Example:
        files = FilesApiClient(session)
        note = await files.create_note("Groceries", [{"type": "text", "value": "milk"}])
        photo = await files.upload_file(jpeg_bytes, "beach.jpg", "image/jpeg", type="image")
    """

    def __init__(self, session: SessionClient) -> None:
        self.session = session

    async def list_files(self, folder_id: int | None = None) -> list[NoteFile]:
        params = {"folderId": folder_id} if folder_id is not None else None
        data = json_or_raise(await self.session.get("/files", params=params))
        return [_file(item) for item in data.get("files", [])]

    async def get_file(self, file_id: int) -> NoteFile:
        return _file(json_or_raise(await self.session.get(f"/files/{file_id}"))["file"])

    async def create_note(
        self, name: str, content: Any = None, folder_id: int | None = None
    ) -> NoteFile:
        response = await self.session.post(
            "/files",
            json={
                "name": name,
                "type": FileType.NOTE.value,
                "content": content,
                "folderId": folder_id,
            },
        )
        return _file(json_or_raise(response)["file"])

    async def update_file(
        self,
        file_id: int,
        name: str | None = None,
        content: Any = None,
        folder_id: int | None = None,
    ) -> NoteFile:
        response = await self.session.put(
            f"/files/{file_id}",
            json={"name": name, "content": content, "folderId": folder_id},
        )
        return _file(json_or_raise(response)["file"])

    async def delete_file(self, file_id: int) -> None:
        json_or_raise(await self.session.delete(f"/files/{file_id}"))

    # Hey future me - the bytes are handed to httpx as a tuple, not a stream. A 401 makes the
    # session client replay the request after refreshing, and a consumed stream can't be sent
    # twice.
    async def upload_file(
        self,
        data: bytes,
        filename: str,
        mime_type: str = "application/octet-stream",
        name: str | None = None,
        type: str | None = None,
        folder_id: int | None = None,
    ) -> NoteFile:
        """Upload an image, video or document as multipart form data."""
        form: dict[str, str] = {}
        if name is not None:
            form["name"] = name
        if type is not None:
            form["type"] = type
        if folder_id is not None:
            form["folderId"] = str(folder_id)

        response = await self.session.post(
            "/upload", files={"file": (filename, data, mime_type)}, data=form
        )
        return _file(json_or_raise(response)["file"])
