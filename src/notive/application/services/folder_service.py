"""Folder management for the signed-in user.

Folders are always scoped by user_id - a folder id that belongs to somebody else
behaves exactly like one that doesn't exist (404), so ids can't be guessed.
"""

import logging

from notive.domain.entities import ApiErrorCode, Folder
from notive.domain.exceptions import EntityNotFoundException, ValidationException
from notive.domain.ports import IFolderRepository

logger = logging.getLogger(__name__)


class FolderService:
    """CRUD over a user's folders (soft delete)."""

    def __init__(self, folders: IFolderRepository) -> None:
        self._folders = folders

    async def list_folders(self, user_id: int, parent_id: int | None = None) -> list[Folder]:
        return await self._folders.list_for_user(user_id, parent_id=parent_id)

    async def create_folder(
        self,
        user_id: int,
        name: str | None,
        icon: str | None = None,
        parent_id: int | None = None,
    ) -> Folder:
        """Create a folder.

        Raises:
            ValidationException: MISSING_FIELDS when name is empty
            EntityNotFoundException: parent_id is not one of the user's folders
        """
        if not name or not name.strip():
            raise ValidationException(
                "Folder name is required", code=ApiErrorCode.MISSING_FIELDS
            )

        if parent_id:
            await self._require_parent(user_id, parent_id)

        folder = await self._folders.add(
            user_id, name=name.strip(), icon=icon, parent_id=parent_id or None
        )
        logger.debug("User %s created folder %s", user_id, folder.id)
        return folder

    async def update_folder(
        self,
        user_id: int,
        folder_id: int,
        name: str | None = None,
        icon: str | None = None,
        parent_id: int | None = None,
    ) -> Folder:
        """Partially update a folder; None/empty values keep the current value.

        Raises:
            EntityNotFoundException: Folder or new parent missing or owned by another user
            ValidationException: INVALID_REQUEST when a folder is made its own parent
        """
        if parent_id:
            if parent_id == folder_id:
                raise ValidationException(
                    "A folder cannot be its own parent", code=ApiErrorCode.INVALID_REQUEST
                )
            await self._require_parent(user_id, parent_id)

        folder = await self._folders.update(
            user_id,
            folder_id,
            name=name.strip() if name and name.strip() else None,
            icon=icon or None,
            parent_id=parent_id or None,
        )
        if folder is None:
            raise EntityNotFoundException("Folder", folder_id)
        return folder

    # Hey future me - the FK only proves the parent row exists, not whose it is. Without
    # this check anyone could hang folders under another user's folder ids.
    async def _require_parent(self, user_id: int, parent_id: int) -> None:
        if await self._folders.get(user_id, parent_id) is None:
            raise EntityNotFoundException("Folder", parent_id)

    async def delete_folder(self, user_id: int, folder_id: int) -> None:
        """Soft-delete a folder.

        Raises:
            EntityNotFoundException: Folder missing or owned by another user
        """
        if not await self._folders.soft_delete(user_id, folder_id):
            raise EntityNotFoundException("Folder", folder_id)
        logger.debug("User %s deleted folder %s", user_id, folder_id)
