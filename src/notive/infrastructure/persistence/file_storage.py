"""Uploaded file bytes on the local disk."""

import asyncio
import logging
import re
import uuid
from pathlib import Path

from notive.config import StorageSettings
from notive.domain.ports import IBlobStorage

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")
_MAX_NAME_LENGTH = 100


def safe_filename(original_name: str | None) -> str:
    """Reduce a client-supplied filename to ``[a-zA-Z0-9_.-]`` characters.

    Example:
        safe_filename("my photo (1).jpg") -> "my_photo__1_.jpg"
    """
    cleaned = _UNSAFE_CHARS.sub("_", Path(original_name or "").name)
    cleaned = cleaned.lstrip(".")[-_MAX_NAME_LENGTH:]
    return cleaned or "file"


class LocalFileStorage(IBlobStorage):
    """Writes uploads into one flat directory served under ``public_prefix``.

    Stored names are ``<uuid4 hex>-<safe original name>``, so two uploads of
    ``photo.jpg`` never collide and the original name stays recognisable.
    """

    def __init__(self, upload_dir: Path | str, public_prefix: str = "/uploads") -> None:
        self.upload_dir = Path(upload_dir)
        self.public_prefix = "/" + public_prefix.strip("/")

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "LocalFileStorage":
        return cls(settings.upload_dir, public_prefix=settings.public_prefix)

    def ensure_dir(self) -> None:
        """Create the upload directory if it is missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    # Hey future me - resolve() is the ONLY way from a stored file_path back to disk. It
    # refuses anything that isn't a bare name under our prefix, so a row with
    # "/uploads/../../etc/passwd" can't make delete() touch files outside upload_dir.
    def resolve(self, file_path: str) -> Path | None:
        """Map a public path like ``/uploads/abc-photo.jpg`` to the file on disk."""
        prefix = self.public_prefix + "/"
        if not file_path.startswith(prefix):
            return None
        name = file_path[len(prefix) :]
        if not name or name != Path(name).name or name in (".", ".."):
            return None
        return self.upload_dir / name

    async def save(self, data: bytes, original_name: str | None) -> str:
        stored_name = f"{uuid.uuid4().hex}-{safe_filename(original_name)}"
        target = self.upload_dir / stored_name

        self.ensure_dir()
        await asyncio.to_thread(target.write_bytes, data)

        logger.debug("Stored upload %s (%d bytes)", stored_name, len(data))
        return f"{self.public_prefix}/{stored_name}"

    async def delete(self, file_path: str) -> None:
        target = self.resolve(file_path)
        if target is None:
            logger.warning("Refusing to delete blob outside upload dir: %s", file_path)
            return
        try:
            await asyncio.to_thread(target.unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Failed to delete upload %s: %s", file_path, e)
