"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from notive.domain.entities import (
    ChatMessage,
    Conversation,
    FileType,
    Folder,
    Message,
    MessageRole,
    NoteFile,
    Subscription,
    UserIdentity,
)


class IUserRepository(ABC):
    """Repository interface for user accounts."""

    @abstractmethod
    async def add(self, name: str, email: str, password_hash: str) -> UserIdentity:
        """Insert a new user and return its public profile.

        Raises:
            DuplicateEntityException: The email is already registered
        """
        pass

    @abstractmethod
    async def get_by_id(self, user_id: int) -> UserIdentity | None:
        """Get user profile by ID."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> UserIdentity | None:
        """Get user profile by email."""
        pass

    @abstractmethod
    async def get_password_hash(self, user_id: int) -> str | None:
        """Get the stored bcrypt hash for a user."""
        pass

    @abstractmethod
    async def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        """Check whether an email is used by another account."""
        pass

    @abstractmethod
    async def update_profile(self, user_id: int, name: str, email: str) -> UserIdentity | None:
        """Replace name and email. Returns None if the user doesn't exist.

        Raises:
            DuplicateEntityException: Another account uses the email
        """
        pass

    @abstractmethod
    async def update_password(self, user_id: int, password_hash: str) -> None:
        """Replace the stored password hash."""
        pass


class ISubscriptionRepository(ABC):
    """Repository interface for subscriptions (one per user)."""

    @abstractmethod
    async def upsert(self, user_id: int, plan: str) -> Subscription:
        """Create or replace the user's subscription."""
        pass

    @abstractmethod
    async def get_by_user(self, user_id: int) -> Subscription | None:
        """Get the user's subscription, if any."""
        pass


class IFolderRepository(ABC):
    """Repository interface for folders."""

    @abstractmethod
    async def get(self, user_id: int, folder_id: int) -> Folder | None:
        """Get a non-deleted folder of a user. None if missing, deleted or not theirs."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int, parent_id: int | None = None) -> list[Folder]:
        """List non-deleted folders of a user, oldest first."""
        pass

    @abstractmethod
    async def add(
        self, user_id: int, name: str, icon: str | None, parent_id: int | None
    ) -> Folder:
        """Create a folder."""
        pass

    @abstractmethod
    async def update(
        self,
        user_id: int,
        folder_id: int,
        name: str | None,
        icon: str | None,
        parent_id: int | None,
    ) -> Folder | None:
        """Partially update a folder. Returns None if not found for that user."""
        pass

    @abstractmethod
    async def soft_delete(self, user_id: int, folder_id: int) -> bool:
        """Mark a folder deleted. Returns False if not found for that user."""
        pass


class IFileRepository(ABC):
    """Repository interface for notes and uploaded files."""

    @abstractmethod
    async def list_for_user(self, user_id: int, folder_id: int | None = None) -> list[NoteFile]:
        """List a user's files, oldest first, optionally only those in one folder."""
        pass

    @abstractmethod
    async def get(self, user_id: int, file_id: int) -> NoteFile | None:
        """Get one file of a user. None if missing or not theirs."""
        pass

    @abstractmethod
    async def add(
        self,
        user_id: int,
        name: str,
        type: FileType,
        folder_id: int | None = None,
        content: list[Any] | None = None,
        file_path: str | None = None,
        mime_type: str | None = None,
        size: int | None = None,
    ) -> NoteFile:
        """Create a note or an upload record."""
        pass

    @abstractmethod
    async def update(
        self,
        user_id: int,
        file_id: int,
        name: str | None,
        content: list[Any] | None,
        folder_id: int | None,
    ) -> NoteFile | None:
        """Partially update a file; None keeps the current value. None if not found."""
        pass

    @abstractmethod
    async def delete(self, user_id: int, file_id: int) -> NoteFile | None:
        """Delete a file row and return what was deleted. None if not found."""
        pass


class IConversationRepository(ABC):
    """Repository interface for AI conversations and their messages."""

    @abstractmethod
    async def list_for_user(
        self, user_id: int, folder_id: int | None = None
    ) -> list[Conversation]:
        """List a user's conversations with message counts, most recently active first."""
        pass

    @abstractmethod
    async def get(self, user_id: int, conversation_id: int) -> Conversation | None:
        """Get one conversation of a user. None if missing or not theirs."""
        pass

    @abstractmethod
    async def add(self, user_id: int, title: str, folder_id: int | None) -> Conversation:
        """Create an empty conversation."""
        pass

    @abstractmethod
    async def update_title(
        self, user_id: int, conversation_id: int, title: str
    ) -> Conversation | None:
        """Rename a conversation and bump updated_at. None if not found."""
        pass

    @abstractmethod
    async def touch(self, conversation_id: int) -> None:
        """Bump updated_at after new activity."""
        pass

    @abstractmethod
    async def delete(self, user_id: int, conversation_id: int) -> bool:
        """Delete a conversation and its messages. False if not found."""
        pass

    @abstractmethod
    async def add_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> Message:
        """Append a message."""
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: int) -> list[Message]:
        """All messages of a conversation, oldest first."""
        pass

    @abstractmethod
    async def count_messages(self, conversation_id: int, role: MessageRole | None = None) -> int:
        """Count messages, optionally only those of one role."""
        pass


class ICompletionProvider(ABC):
    """Chat completion service (the AI behind conversations).

    Implementations raise CompletionError for every failure: transport errors,
    non-2xx answers, and replies without text.
    """

    @abstractmethod
    async def complete(
        self, messages: Sequence[ChatMessage], max_tokens: int, temperature: float
    ) -> str:
        """Return the assistant reply to ``messages``."""
        pass

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release resources held by the provider."""


class IBlobStorage(ABC):
    """Where uploaded file bytes live. Rows only keep the returned public path."""

    @abstractmethod
    async def save(self, data: bytes, original_name: str | None) -> str:
        """Store bytes under a fresh unique name and return its public path."""
        pass

    @abstractmethod
    async def delete(self, file_path: str) -> None:
        """Remove a stored blob. Best effort: a missing blob is not an error."""
        pass


class IKeyValueStorage(ABC):
    """Device-local durable key/value storage.

    multi_set/multi_remove MUST be atomic: readers never see half of a batch.
    """

    @abstractmethod
    async def multi_get(self, keys: list[str]) -> dict[str, str | None]:
        """Read several keys at once (missing keys map to None)."""
        pass

    @abstractmethod
    async def multi_set(self, items: dict[str, str]) -> None:
        """Write several keys in one transaction."""
        pass

    @abstractmethod
    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys in one transaction."""
        pass

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release resources held by the backend."""


__all__ = [
    "IBlobStorage",
    "ICompletionProvider",
    "IConversationRepository",
    "IFileRepository",
    "IFolderRepository",
    "IKeyValueStorage",
    "ISubscriptionRepository",
    "IUserRepository",
]