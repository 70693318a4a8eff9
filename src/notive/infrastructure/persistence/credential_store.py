# Hey future me - this is the DEVICE side of auth. It holds exactly two values:
#
#   authToken -> the bearer string the server signed
#   userData  -> JSON of the UserIdentity that came with it
#
# The pair is only useful together. A token without a user (or vice versa) is treated as
# "not logged in", so we write and remove both keys in ONE storage transaction and refuse to
# save half a pair. Reads never raise: a broken disk just means the user has to sign in again.
"""
Device-local credential storage for the session client.

Two storage backends implement IKeyValueStorage:
- SqliteKeyValueStorage: aiosqlite file, survives restarts
- InMemoryKeyValueStorage: dict, for tests and throwaway sessions
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import NamedTuple

import aiosqlite

from notive.config import ClientSettings
from notive.domain.entities import CredentialRecord, UserIdentity
from notive.domain.exceptions import IncompleteCredentialsError
from notive.domain.ports import IKeyValueStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
USER_KEY = "userData"


class AuthCheck(NamedTuple):
    """Result of CredentialStore.check_auth()."""

    is_authenticated: bool
    user: UserIdentity | None


# =============================================================================
# Storage backends
# =============================================================================


class SqliteKeyValueStorage(IKeyValueStorage):
    """Key/value pairs in a small SQLite file.

    Every call opens its own connection. The session client makes a handful of
    store calls per sign-in, so connection reuse buys nothing here and a fresh
    connection never ends up shared across event loops.

    Example:
        storage = SqliteKeyValueStorage("data/credentials.db")
        await storage.multi_set({"authToken": "...", "userData": "{...}"})
    """

    def __init__(self, db_path: Path | str = "data/credentials.db") -> None:
        self._db_path = Path(db_path)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def init(self) -> None:
        """Create the data directory and kv table if they don't exist."""
        async with self._init_lock:
            if self._initialized:
                return

            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("PRAGMA journal_mode=WAL")
                await db.execute("PRAGMA busy_timeout=500")
                await db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
                await db.commit()

            self._initialized = True
            logger.debug("Credential storage ready at %s", self._db_path)

    async def multi_get(self, keys: list[str]) -> dict[str, str | None]:
        await self.init()
        result: dict[str, str | None] = dict.fromkeys(keys)
        if not keys:
            return result

        placeholders = ",".join("?" for _ in keys)
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                f"SELECT key, value FROM kv WHERE key IN ({placeholders})",  # nosec B608
                keys,
            ) as cursor:
                async for key, value in cursor:
                    result[key] = value
        return result

    async def multi_set(self, items: dict[str, str]) -> None:
        await self.init()
        async with aiosqlite.connect(self._db_path) as db:
            # executemany + single commit = one transaction for the whole batch
            await db.executemany(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                list(items.items()),
            )
            await db.commit()

    async def multi_remove(self, keys: list[str]) -> None:
        await self.init()
        async with aiosqlite.connect(self._db_path) as db:
            await db.executemany("DELETE FROM kv WHERE key = ?", [(key,) for key in keys])
            await db.commit()


class InMemoryKeyValueStorage(IKeyValueStorage):
    """Dict-backed storage. Lost on restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    @property
    def data(self) -> dict[str, str]:
        """Copy of the raw contents (handy in tests)."""
        return dict(self._data)

    async def multi_get(self, keys: list[str]) -> dict[str, str | None]:
        return {key: self._data.get(key) for key in keys}

    async def multi_set(self, items: dict[str, str]) -> None:
        self._data.update(items)

    async def multi_remove(self, keys: list[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


# =============================================================================
# Credential store
# =============================================================================


class CredentialStore:
    """Persists the (token, user) pair of the signed-in account.

    Writes go through one asyncio.Lock, so a load() issued after save()/clear()
    returned always sees the complete new state. Concurrent saves are
    last-writer-wins.
    """

    def __init__(self, storage: IKeyValueStorage) -> None:
        self._storage = storage
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> CredentialStore:
        """Build a store backed by the SQLite file named in client settings."""
        return cls(SqliteKeyValueStorage(settings.credential_db_path))

    @property
    def storage(self) -> IKeyValueStorage:
        return self._storage

    async def save(self, token: str | None, user: UserIdentity | None) -> bool:
        """Persist a complete credential pair.

        Args:
            token: Bearer token issued by the server
            user: Profile returned alongside the token

        Returns:
            True if the pair was written. False when the backend failed, in which
            case the device has no usable session.

        Raises:
            IncompleteCredentialsError: If token or user is missing
        """
        if not token or user is None:
            raise IncompleteCredentialsError()

        payload = {TOKEN_KEY: token, USER_KEY: json.dumps(user.to_dict())}
        async with self._lock:
            try:
                await self._storage.multi_set(payload)
            except Exception as e:
                logger.error("Failed to save credentials: %s", e, exc_info=True)
                return False
        return True

    async def load(self) -> CredentialRecord:
        """Read the stored pair.

        Never raises. Missing keys, unparseable user JSON, or a storage fault
        all yield an empty CredentialRecord.
        """
        values = await self._read_raw()
        token = values.get(TOKEN_KEY)
        raw_user = values.get(USER_KEY)
        if not token or not raw_user:
            return CredentialRecord()

        try:
            user = UserIdentity.from_dict(json.loads(raw_user))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Stored user profile is unreadable, ignoring it: %s", e)
            return CredentialRecord()

        return CredentialRecord(token=token, user=user)

    async def _read_raw(self) -> dict[str, str | None]:
        async with self._lock:
            try:
                return await self._storage.multi_get([TOKEN_KEY, USER_KEY])
            except Exception as e:
                logger.warning("Failed to read credentials: %s", e)
                return {}

    async def clear(self) -> None:
        """Remove both keys. Best effort: failures are logged, not raised."""
        async with self._lock:
            try:
                await self._storage.multi_remove([TOKEN_KEY, USER_KEY])
            except Exception as e:
                logger.warning("Failed to clear credentials: %s", e)

    async def update_user(self, user: UserIdentity) -> bool:
        """Replace the cached profile and keep the current token.

        Returns:
            Same as save()

        Raises:
            IncompleteCredentialsError: If there is no stored token
        """
        current = await self.load()
        return await self.save(current.token, user)

    @staticmethod
    def validate_structure(token: str | None) -> bool:
        """Cheap shape check: a JWT has exactly three dot-separated segments.

        This does NOT verify the signature, the server does that.
        """
        if not token:
            return False
        return len(token.split(".")) == 3

    async def check_auth(self) -> AuthCheck:
        """Load credentials and drop them if the token is structurally broken.

        The token is checked on its own first: a malformed token is cleared even when
        the user half of the pair is missing or unreadable.
        """
        token = (await self._read_raw()).get(TOKEN_KEY)
        if token and not self.validate_structure(token):
            logger.info("Stored token is malformed, clearing credentials")
            await self.clear()
            return AuthCheck(is_authenticated=False, user=None)

        record = await self.load()
        if record.is_empty:
            return AuthCheck(is_authenticated=False, user=None)

        return AuthCheck(is_authenticated=True, user=record.user)

    async def close(self) -> None:
        await self._storage.close()
