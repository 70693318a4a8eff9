"""Client for the folder endpoints."""

from datetime import datetime
from typing import Any

from notive.domain.entities import Folder
from notive.infrastructure.integrations.api_errors import json_or_raise
from notive.infrastructure.integrations.session_client import SessionClient


def _folder(data: dict[str, Any]) -> Folder:
    return Folder(
        id=int(data["id"]),
        user_id=int(data["userId"]),
        name=str(data["name"]),
        icon=data.get("icon"),
        parent_id=data.get("parentId"),
        is_deleted=bool(data.get("isDeleted", False)),
        created_at=datetime.fromisoformat(data["createdAt"]),
        updated_at=datetime.fromisoformat(data["updatedAt"]),
    )


class FoldersApiClient:
    """Folder CRUD through the session client.

    Example:
        folders = FoldersApiClient(session)
        inbox = await folders.create_folder("Inbox", icon="inbox")
    """

    def __init__(self, session: SessionClient) -> None:
        self.session = session

    async def list_folders(self, parent_id: int | None = None) -> list[Folder]:
        params = {"parentId": parent_id} if parent_id is not None else None
        data = json_or_raise(await self.session.get("/folders", params=params))
        return [_folder(item) for item in data.get("folders", [])]

    async def create_folder(
        self, name: str, icon: str | None = None, parent_id: int | None = None
    ) -> Folder:
        response = await self.session.post(
            "/folders", json={"name": name, "icon": icon, "parentId": parent_id}
        )
        return _folder(json_or_raise(response)["folder"])

    async def update_folder(
        self,
        folder_id: int,
        name: str | None = None,
        icon: str | None = None,
        parent_id: int | None = None,
    ) -> Folder:
        response = await self.session.put(
            f"/folders/{folder_id}",
            json={"name": name, "icon": icon, "parentId": parent_id},
        )
        return _folder(json_or_raise(response)["folder"])

    async def delete_folder(self, folder_id: int) -> None:
        json_or_raise(await self.session.delete(f"/folders/{folder_id}"))
