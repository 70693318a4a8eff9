"""Notes and uploaded media in a user's folders.

Notes are created through ``create_note`` with their content inline. Images,
videos and documents come in through ``upload``: the bytes go to blob storage,
the row keeps the public path. Like folders, a file id owned by somebody else
behaves exactly like a missing one.
"""

import json
import logging
from typing import Any

from notive.domain.entities import MEDIA_FILE_TYPES, ApiErrorCode, FileType, NoteFile
from notive.domain.exceptions import EntityNotFoundException, ValidationException
from notive.domain.ports import IBlobStorage, IFileRepository, IFolderRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024


# Hey future me - clients send note content in every shape imaginable: a proper list of
# blocks, one block object, a JSON string of either, or plain text. The table only ever
# stores a LIST so readers never have to guess. The rules, in order:
#   None              -> None (nothing to store / keep the current content)
#   list              -> as is
#   str               -> json.loads it; a list stays, anything else is wrapped as [value]
#                        not JSON at all -> [{"type": "text", "value": <the string>}]
#   dict              -> [dict]
#   anything else     -> []
def normalize_note_content(content: Any) -> list[Any] | None:
    """Coerce incoming note content into a list of blocks."""
    if content is None:
        return None
    if isinstance(content, list):
        return content
    if isinstance(content, str):
        try:
            parsed = json.loads(content)
        except ValueError:
            return [{"type": "text", "value": content}]
        return parsed if isinstance(parsed, list) else [parsed]
    if isinstance(content, dict):
        return [content]
    return []


class FileService:
    """CRUD over notes plus media uploads."""

    def __init__(
        self,
        files: IFileRepository,
        folders: IFolderRepository,
        blobs: IBlobStorage,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._files = files
        self._folders = folders
        self._blobs = blobs
        self._max_upload_bytes = max_upload_bytes

    async def _require_folder(self, user_id: int, folder_id: int | None) -> int | None:
        if not folder_id:
            return None
        if await self._folders.get(user_id, folder_id) is None:
            raise EntityNotFoundException("Folder", folder_id)
        return folder_id

    async def list_files(self, user_id: int, folder_id: int | None = None) -> list[NoteFile]:
        return await self._files.list_for_user(user_id, folder_id=folder_id)

    async def get_file(self, user_id: int, file_id: int) -> NoteFile:
        """Get one of the user's files.

        Raises:
            EntityNotFoundException: File missing or owned by another user
        """
        file = await self._files.get(user_id, file_id)
        if file is None:
            raise EntityNotFoundException("File", file_id)
        return file

    async def create_note(
        self,
        user_id: int,
        name: str | None,
        type: str | None,
        content: Any = None,
        folder_id: int | None = None,
    ) -> NoteFile:
        """Create a note.

        Args:
            user_id: Owner
            name: Display name (required)
            type: Must be ``"note"``; media goes through upload()
            content: Note blocks in any shape normalize_note_content() accepts
            folder_id: Optional folder of the user

        Raises:
            ValidationException: MISSING_FIELDS without name/type, INVALID_FILE_TYPE
                for anything but a note
            EntityNotFoundException: folder_id is not one of the user's folders
        """
        if not name or not name.strip() or not type:
            raise ValidationException(
                "Name and type are required", code=ApiErrorCode.MISSING_FIELDS
            )
        if type != FileType.NOTE.value:
            raise ValidationException(code=ApiErrorCode.INVALID_FILE_TYPE)

        folder_id = await self._require_folder(user_id, folder_id)
        note = await self._files.add(
            user_id,
            name=name.strip(),
            type=FileType.NOTE,
            folder_id=folder_id,
            content=normalize_note_content(content),
        )
        logger.debug("User %s created note %s", user_id, note.id)
        return note

    async def update_file(
        self,
        user_id: int,
        file_id: int,
        name: str | None = None,
        content: Any = None,
        folder_id: int | None = None,
    ) -> NoteFile:
        """Partially update a file; None/empty values keep the current value.

        Raises:
            EntityNotFoundException: File or target folder missing or owned by another user
        """
        folder_id = await self._require_folder(user_id, folder_id)
        file = await self._files.update(
            user_id,
            file_id,
            name=name.strip() if name and name.strip() else None,
            content=normalize_note_content(content),
            folder_id=folder_id,
        )
        if file is None:
            raise EntityNotFoundException("File", file_id)
        return file

    async def delete_file(self, user_id: int, file_id: int) -> None:
        """Delete a file and, for uploads, its bytes.

        Raises:
            EntityNotFoundException: File missing or owned by another user
        """
        deleted = await self._files.delete(user_id, file_id)
        if deleted is None:
            raise EntityNotFoundException("File", file_id)
        if deleted.file_path:
            await self._blobs.delete(deleted.file_path)
        logger.debug("User %s deleted file %s", user_id, file_id)

    async def upload(
        self,
        user_id: int,
        data: bytes | None,
        filename: str | None = None,
        mime_type: str | None = None,
        name: str | None = None,
        type: str | None = None,
        folder_id: int | None = None,
    ) -> NoteFile:
        """Store an uploaded image, video or document.

        An unknown or missing ``type`` is stored as a document. ``name`` defaults
        to the uploaded filename.

        Raises:
            ValidationException: NO_FILE without data, FILE_TOO_LARGE over the limit
            EntityNotFoundException: folder_id is not one of the user's folders
        """
        if data is None:
            raise ValidationException(code=ApiErrorCode.NO_FILE)
        if len(data) > self._max_upload_bytes:
            raise ValidationException(
                f"File is larger than {self._max_upload_bytes} bytes",
                code=ApiErrorCode.FILE_TOO_LARGE,
            )

        safe_type = FileType(type) if type in {t.value for t in MEDIA_FILE_TYPES} else None
        folder_id = await self._require_folder(user_id, folder_id)
        file_path = await self._blobs.save(data, filename)

        # The row and the bytes live or die together
        try:
            file = await self._files.add(
                user_id,
                name=(name or "").strip() or filename or file_path.rsplit("/", 1)[-1],
                type=safe_type or FileType.DOCUMENT,
                folder_id=folder_id,
                file_path=file_path,
                mime_type=mime_type or None,
                size=len(data),
            )
        except Exception:
            await self._blobs.delete(file_path)
            raise

        logger.info("User %s uploaded %s (%d bytes)", user_id, file.type.value, len(data))
        return file
