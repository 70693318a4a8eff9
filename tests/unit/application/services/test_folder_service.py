"""Tests for FolderService."""

from unittest.mock import AsyncMock

import pytest

from notive.application.services.folder_service import FolderService
from notive.domain.entities import ApiErrorCode, Folder
from notive.domain.exceptions import EntityNotFoundException, ValidationException
from notive.domain.ports import IFolderRepository


@pytest.fixture
def folders() -> AsyncMock:
    return AsyncMock(spec=IFolderRepository)


@pytest.fixture
def service(folders: AsyncMock) -> FolderService:
    return FolderService(folders)


class TestCreateFolder:
    async def test_name_is_trimmed(self, service: FolderService, folders: AsyncMock) -> None:
        folders.add.return_value = Folder(id=1, user_id=2, name="Work")

        await service.create_folder(2, "  Work ", icon="briefcase")

        folders.add.assert_awaited_once_with(2, name="Work", icon="briefcase", parent_id=None)

    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_name_required(
        self, service: FolderService, folders: AsyncMock, name: str | None
    ) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.create_folder(2, name)

        assert exc_info.value.code == ApiErrorCode.MISSING_FIELDS
        folders.add.assert_not_awaited()

    async def test_parent_must_belong_to_user(
        self, service: FolderService, folders: AsyncMock
    ) -> None:
        folders.get.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.create_folder(2, "Reports", parent_id=7)

        folders.get.assert_awaited_once_with(2, 7)
        folders.add.assert_not_awaited()

    async def test_owned_parent(self, service: FolderService, folders: AsyncMock) -> None:
        folders.get.return_value = Folder(id=7, user_id=2, name="Work")
        folders.add.return_value = Folder(id=8, user_id=2, name="Reports", parent_id=7)

        folder = await service.create_folder(2, "Reports", parent_id=7)

        assert folder.parent_id == 7
        folders.add.assert_awaited_once_with(2, name="Reports", icon=None, parent_id=7)


class TestUpdateFolder:
    async def test_blank_values_keep_current(
        self, service: FolderService, folders: AsyncMock
    ) -> None:
        folders.update.return_value = Folder(id=1, user_id=2, name="Work")

        await service.update_folder(2, 1, name="  ", icon="", parent_id=None)

        folders.update.assert_awaited_once_with(2, 1, name=None, icon=None, parent_id=None)

    async def test_foreign_folder_is_not_found(
        self, service: FolderService, folders: AsyncMock
    ) -> None:
        folders.update.return_value = None

        with pytest.raises(EntityNotFoundException) as exc_info:
            await service.update_folder(2, 99, name="Mine now")
        assert exc_info.value.code == ApiErrorCode.NOT_FOUND

    async def test_move_under_foreign_folder(
        self, service: FolderService, folders: AsyncMock
    ) -> None:
        folders.get.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.update_folder(2, 1, parent_id=50)

        folders.update.assert_not_awaited()

    async def test_cannot_be_own_parent(self, service: FolderService, folders: AsyncMock) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.update_folder(2, 1, parent_id=1)

        assert exc_info.value.code == ApiErrorCode.INVALID_REQUEST
        folders.update.assert_not_awaited()


class TestDeleteFolder:
    async def test_soft_delete(self, service: FolderService, folders: AsyncMock) -> None:
        folders.soft_delete.return_value = True
        await service.delete_folder(2, 1)
        folders.soft_delete.assert_awaited_once_with(2, 1)

    async def test_missing(self, service: FolderService, folders: AsyncMock) -> None:
        folders.soft_delete.return_value = False
        with pytest.raises(EntityNotFoundException):
            await service.delete_folder(2, 1)
