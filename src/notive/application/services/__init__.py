"""Application services - account, session and content use cases."""

from notive.application.services.account_service import AccountService
from notive.application.services.auth_session_service import AuthSessionController
from notive.application.services.conversation_service import ConversationService
from notive.application.services.file_service import FileService
from notive.application.services.folder_service import FolderService
from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.subscription_service import SubscriptionService
from notive.application.services.token_issuer import Clock, TokenIssuer, utc_clock

__all__ = [
    "AccountService",
    "AuthSessionController",
    "Clock",
    "ConversationService",
    "FileService",
    "FolderService",
    "PasswordHasher",
    "SubscriptionService",
    "TokenIssuer",
    "utc_clock",
]
