"""bcrypt password hashing.

bcrypt is deliberately slow (~50-100ms at 10 rounds), so every call runs in a worker
thread via asyncio.to_thread - blocking the event loop for that long would stall every
other request on this worker.
"""

import asyncio

import bcrypt


class PasswordHasher:
    """Hash and verify passwords with bcrypt."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        # Compared against when the email is unknown so "no such user" costs the same
        # as "wrong password" and login timing doesn't leak which emails exist.
        self._dummy_hash = bcrypt.hashpw(b"notive-dummy-password", bcrypt.gensalt(rounds))

    async def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        hashed = await asyncio.to_thread(
            bcrypt.hashpw, password.encode("utf-8"), bcrypt.gensalt(self._rounds)
        )
        return hashed.decode("utf-8")

    async def verify(self, password: str, hashed: str | None) -> bool:
        """Check a password against a stored hash.

        Args:
            password: Plain text candidate
            hashed: Stored hash, or None when the account doesn't exist

        Returns:
            True only if hashed is present and matches
        """
        candidate = password.encode("utf-8")
        if hashed is None:
            await asyncio.to_thread(bcrypt.checkpw, candidate, self._dummy_hash)
            return False
        try:
            return await asyncio.to_thread(bcrypt.checkpw, candidate, hashed.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
