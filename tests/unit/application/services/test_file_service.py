"""Tests for FileService and note content normalisation."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from notive.application.services.file_service import FileService, normalize_note_content
from notive.domain.entities import ApiErrorCode, FileType, Folder, NoteFile
from notive.domain.exceptions import EntityNotFoundException, ValidationException
from notive.domain.ports import IBlobStorage, IFileRepository, IFolderRepository


@pytest.fixture
def files() -> AsyncMock:
    return AsyncMock(spec=IFileRepository)


@pytest.fixture
def folders() -> AsyncMock:
    return AsyncMock(spec=IFolderRepository)


@pytest.fixture
def blobs() -> AsyncMock:
    blobs = AsyncMock(spec=IBlobStorage)
    blobs.save.return_value = "/uploads/abc-photo.jpg"
    return blobs


@pytest.fixture
def service(files: AsyncMock, folders: AsyncMock, blobs: AsyncMock) -> FileService:
    return FileService(files, folders, blobs, max_upload_bytes=10)


def _note(**overrides: Any) -> NoteFile:
    values: dict[str, Any] = {"id": 1, "user_id": 2, "name": "Todo", "type": FileType.NOTE}
    values.update(overrides)
    return NoteFile(**values)


class TestNormalizeNoteContent:
    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (None, None),
            ([{"type": "text", "value": "a"}], [{"type": "text", "value": "a"}]),
            ('[{"type": "text", "value": "a"}]', [{"type": "text", "value": "a"}]),
            ('{"type": "text", "value": "a"}', [{"type": "text", "value": "a"}]),
            ('"quoted"', ["quoted"]),
            ("just some words", [{"type": "text", "value": "just some words"}]),
            ({"type": "todo", "done": False}, [{"type": "todo", "done": False}]),
            (42, []),
        ],
    )
    def test_shapes(self, content: Any, expected: list[Any] | None) -> None:
        assert normalize_note_content(content) == expected


class TestCreateNote:
    async def test_stores_normalized_content(
        self, service: FileService, files: AsyncMock
    ) -> None:
        files.add.return_value = _note()

        await service.create_note(2, "  Todo ", "note", content="buy milk")

        files.add.assert_awaited_once_with(
            2,
            name="Todo",
            type=FileType.NOTE,
            folder_id=None,
            content=[{"type": "text", "value": "buy milk"}],
        )

    @pytest.mark.parametrize(("name", "type"), [(None, "note"), ("  ", "note"), ("Todo", None)])
    async def test_name_and_type_required(
        self, service: FileService, files: AsyncMock, name: str | None, type: str | None
    ) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.create_note(2, name, type)

        assert exc_info.value.code == ApiErrorCode.MISSING_FIELDS
        files.add.assert_not_awaited()

    @pytest.mark.parametrize("type", ["image", "video", "document", "spreadsheet"])
    async def test_only_notes(self, service: FileService, files: AsyncMock, type: str) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.create_note(2, "Photo", type)

        assert exc_info.value.code == ApiErrorCode.INVALID_FILE_TYPE
        files.add.assert_not_awaited()

    async def test_folder_must_belong_to_user(
        self, service: FileService, files: AsyncMock, folders: AsyncMock
    ) -> None:
        folders.get.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.create_note(2, "Todo", "note", folder_id=9)

        folders.get.assert_awaited_once_with(2, 9)
        files.add.assert_not_awaited()

    async def test_owned_folder(
        self, service: FileService, files: AsyncMock, folders: AsyncMock
    ) -> None:
        folders.get.return_value = Folder(id=9, user_id=2, name="Work")
        files.add.return_value = _note(folder_id=9)

        note = await service.create_note(2, "Todo", "note", folder_id=9)

        assert note.folder_id == 9
        assert files.add.await_args.kwargs["folder_id"] == 9


class TestGetUpdateDelete:
    async def test_foreign_file_is_not_found(
        self, service: FileService, files: AsyncMock
    ) -> None:
        files.get.return_value = None

        with pytest.raises(EntityNotFoundException) as exc_info:
            await service.get_file(2, 5)
        assert exc_info.value.code == ApiErrorCode.NOT_FOUND

    async def test_update_blank_values_keep_current(
        self, service: FileService, files: AsyncMock
    ) -> None:
        files.update.return_value = _note()

        await service.update_file(2, 1, name="  ", content=None, folder_id=None)

        files.update.assert_awaited_once_with(2, 1, name=None, content=None, folder_id=None)

    async def test_update_missing(self, service: FileService, files: AsyncMock) -> None:
        files.update.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.update_file(2, 1, name="Renamed")

    async def test_delete_note_leaves_storage_alone(
        self, service: FileService, files: AsyncMock, blobs: AsyncMock
    ) -> None:
        files.delete.return_value = _note()

        await service.delete_file(2, 1)

        blobs.delete.assert_not_awaited()

    async def test_delete_upload_removes_bytes(
        self, service: FileService, files: AsyncMock, blobs: AsyncMock
    ) -> None:
        files.delete.return_value = _note(type=FileType.IMAGE, file_path="/uploads/x-a.png")

        await service.delete_file(2, 1)

        blobs.delete.assert_awaited_once_with("/uploads/x-a.png")

    async def test_delete_missing(self, service: FileService, files: AsyncMock) -> None:
        files.delete.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.delete_file(2, 1)


class TestUpload:
    async def test_stores_bytes_then_row(
        self, service: FileService, files: AsyncMock, blobs: AsyncMock
    ) -> None:
        files.add.return_value = _note(type=FileType.IMAGE, file_path="/uploads/abc-photo.jpg")

        await service.upload(2, b"jpeg", filename="photo.jpg", mime_type="image/jpeg", type="image")

        blobs.save.assert_awaited_once_with(b"jpeg", "photo.jpg")
        files.add.assert_awaited_once_with(
            2,
            name="photo.jpg",
            type=FileType.IMAGE,
            folder_id=None,
            file_path="/uploads/abc-photo.jpg",
            mime_type="image/jpeg",
            size=4,
        )

    @pytest.mark.parametrize("type", [None, "", "note", "spreadsheet"])
    async def test_unknown_type_becomes_document(
        self, service: FileService, files: AsyncMock, type: str | None
    ) -> None:
        files.add.return_value = _note(type=FileType.DOCUMENT)

        await service.upload(2, b"data", filename="a.bin", type=type)

        assert files.add.await_args.kwargs["type"] is FileType.DOCUMENT

    async def test_explicit_name_wins(self, service: FileService, files: AsyncMock) -> None:
        files.add.return_value = _note(type=FileType.VIDEO)

        await service.upload(2, b"mp4", filename="clip.mp4", name=" Holiday ", type="video")

        assert files.add.await_args.kwargs["name"] == "Holiday"

    async def test_no_file(
        self, service: FileService, files: AsyncMock, blobs: AsyncMock
    ) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.upload(2, None)

        assert exc_info.value.code == ApiErrorCode.NO_FILE
        blobs.save.assert_not_awaited()

    async def test_too_large(self, service: FileService, blobs: AsyncMock) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.upload(2, b"x" * 11, filename="big.bin")

        assert exc_info.value.code == ApiErrorCode.FILE_TOO_LARGE
        blobs.save.assert_not_awaited()

    async def test_foreign_folder_stores_nothing(
        self, service: FileService, folders: AsyncMock, blobs: AsyncMock
    ) -> None:
        folders.get.return_value = None

        with pytest.raises(EntityNotFoundException):
            await service.upload(2, b"data", filename="a.pdf", folder_id=4)

        blobs.save.assert_not_awaited()

    async def test_failed_insert_removes_bytes(
        self, service: FileService, files: AsyncMock, blobs: AsyncMock
    ) -> None:
        files.add.side_effect = RuntimeError("database is locked")

        with pytest.raises(RuntimeError):
            await service.upload(2, b"data", filename="a.pdf")

        blobs.delete.assert_awaited_once_with("/uploads/abc-photo.jpg")
