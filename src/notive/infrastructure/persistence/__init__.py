"""Infrastructure persistence layer."""

from .credential_store import (
    AuthCheck,
    CredentialStore,
    InMemoryKeyValueStorage,
    SqliteKeyValueStorage,
)
from .database import Database
from .models import (
    Base,
    ConversationModel,
    FileModel,
    FolderModel,
    MessageModel,
    SubscriptionModel,
    UserModel,
)
from .repositories import (
    ConversationRepository,
    FileRepository,
    FolderRepository,
    SubscriptionRepository,
    UserRepository,
)

__all__ = [
    # Database
    "Database",
    "Base",
    # Models
    "UserModel",
    "SubscriptionModel",
    "FolderModel",
    "FileModel",
    "ConversationModel",
    "MessageModel",
    # Repositories
    "UserRepository",
    "SubscriptionRepository",
    "FolderRepository",
    "FileRepository",
    "ConversationRepository",
    # Device credential storage
    "AuthCheck",
    "CredentialStore",
    "InMemoryKeyValueStorage",
    "SqliteKeyValueStorage",
]
