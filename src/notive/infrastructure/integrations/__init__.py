"""HTTP clients for talking to the Notive API and the AI provider."""

from notive.infrastructure.integrations.auth_api_client import AuthApiClient
from notive.infrastructure.integrations.completion_client import ChatCompletionClient
from notive.infrastructure.integrations.conversations_api_client import ConversationsApiClient
from notive.infrastructure.integrations.files_api_client import FilesApiClient
from notive.infrastructure.integrations.folders_api_client import FoldersApiClient
from notive.infrastructure.integrations.session_client import SessionClient

__all__ = [
    "AuthApiClient",
    "ChatCompletionClient",
    "ConversationsApiClient",
    "FilesApiClient",
    "FoldersApiClient",
    "SessionClient",
]
