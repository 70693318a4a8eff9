"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from notive.domain.entities.error_codes import (
    ERROR_KINDS,
    ApiErrorCode,
    ErrorKind,
    get_error_message,
    kind_for_code,
    kind_for_status,
)


# Hey future me, UserIdentity is the MINIMAL profile - id, name, email. The server owns the
# real row (with the password hash), the client only keeps this read-only copy for display.
# NEVER add the password hash here, this object is serialized into API responses AND into
# the device's credential store!
@dataclass(frozen=True)
class UserIdentity:
    """Public user profile shared between server and client."""

    id: int
    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire/storage shape."""
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserIdentity":
        """Build from a wire/storage dict.

        Raises:
            KeyError: If a field is missing
            ValueError: If id is not an integer
        """
        return cls(id=int(data["id"]), name=str(data["name"]), email=str(data["email"]))


@dataclass(frozen=True)
class TokenClaims:
    """Decoded content of a session token."""

    subject_id: int
    subject_email: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token is past its expiry."""
        current = now or datetime.now(UTC)
        return current >= self.expires_at


@dataclass(frozen=True)
class CredentialRecord:
    """The (token, user) pair held on the device.

    An empty record (both None) means "not authenticated". Half-filled records are
    never handed out by the credential store.
    """

    token: str | None = None
    user: UserIdentity | None = None

    @property
    def is_empty(self) -> bool:
        """True when no usable credentials are present."""
        return not self.token or self.user is None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of register/login/refresh: a fresh token and profile snapshot."""

    token: str
    user: UserIdentity


class AuthState(str, Enum):
    """Client-side authentication state."""

    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of the auth session exposed to the UI layer."""

    state: AuthState
    user: UserIdentity | None = None
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state is AuthState.INITIALIZING


# Plans are static - the price/limit strings are display values, not billing data.
@dataclass(frozen=True)
class Plan:
    """Subscription plan offered to users."""

    name: str
    price: str
    tokens: str
    storage: str

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "price": self.price,
            "tokens": self.tokens,
            "storage": self.storage,
        }


PLANS: tuple[Plan, ...] = (
    Plan(name="Lite", price="$17/mo", tokens="100,000", storage="10 GB"),
    Plan(name="Standard", price="$47/mo", tokens="500,000", storage="100 GB"),
    Plan(name="Pro", price="$97/mo", tokens="Unlimited", storage="Unlimited"),
)


@dataclass
class Subscription:
    """A user's current plan."""

    user_id: int
    plan: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class Folder:
    """A user-owned folder. Deletion is soft (is_deleted flag)."""

    id: int
    user_id: int
    name: str
    icon: str | None = None
    parent_id: int | None = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Folder name cannot be empty")


# Listen up, a "file" is either a NOTE (structured content blocks stored inline as JSON) or an
# uploaded blob (image/video/document) whose bytes live on disk under file_path. Notes never
# have a file_path and uploads never have content.
class FileType(str, Enum):
    """Kind of item stored in a folder."""

    NOTE = "note"
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


MEDIA_FILE_TYPES: frozenset[FileType] = frozenset(
    {FileType.IMAGE, FileType.VIDEO, FileType.DOCUMENT}
)


@dataclass
class NoteFile:
    """A note or uploaded media item owned by a user."""

    id: int
    user_id: int
    name: str
    type: FileType
    folder_id: int | None = None
    content: list[Any] | None = None
    file_path: str | None = None
    mime_type: str | None = None
    size: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_upload(self) -> bool:
        return self.file_path is not None


class MessageRole(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """One turn handed to the completion provider."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class Message:
    """A stored message of a conversation."""

    id: int
    conversation_id: int
    role: MessageRole
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_chat(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)


@dataclass
class Conversation:
    """An AI chat thread, optionally filed under a folder."""

    id: int
    user_id: int
    title: str
    folder_id: int | None = None
    message_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


__all__ = [
    "ERROR_KINDS",
    "MEDIA_FILE_TYPES",
    "PLANS",
    "ApiErrorCode",
    "AuthResult",
    "AuthSnapshot",
    "AuthState",
    "ChatMessage",
    "Conversation",
    "CredentialRecord",
    "ErrorKind",
    "Folder",
    "FileType",
    "Message",
    "MessageRole",
    "NoteFile",
    "Plan",
    "Subscription",
    "TokenClaims",
    "UserIdentity",
    "get_error_message",
    "kind_for_code",
    "kind_for_status",
]
