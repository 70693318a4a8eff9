"""Dependency injection for API endpoints."""

import logging
from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notive.application.services.account_service import AccountService
from notive.application.services.conversation_service import ConversationService
from notive.application.services.file_service import FileService
from notive.application.services.folder_service import FolderService
from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.subscription_service import SubscriptionService
from notive.application.services.token_issuer import TokenIssuer
from notive.config import Settings
from notive.domain.entities import ApiErrorCode, TokenClaims
from notive.domain.exceptions import AuthenticationError, AuthorizationError, TokenError
from notive.domain.ports import IBlobStorage, ICompletionProvider
from notive.infrastructure.persistence.database import Database
from notive.infrastructure.persistence.repositories import (
    ConversationRepository,
    FileRepository,
    FolderRepository,
    SubscriptionRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


# Hey future me - everything long-lived (settings, db, token issuer, hasher, blob storage,
# completion provider) is created ONCE in lifespan() / create_app() and hung on app.state.
# These getters only read it back. If an attribute is missing the app didn't start properly,
# so we answer 503 instead of crashing.
def _from_state(request: Request, name: str) -> object:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return value


def get_app_settings(request: Request) -> Settings:
    """Get the Settings the app was created with."""
    return cast(Settings, _from_state(request, "settings"))


def get_token_issuer(request: Request) -> TokenIssuer:
    """Get the process-wide TokenIssuer."""
    return cast(TokenIssuer, _from_state(request, "token_issuer"))


def get_password_hasher(request: Request) -> PasswordHasher:
    """Get the process-wide PasswordHasher."""
    return cast(PasswordHasher, _from_state(request, "password_hasher"))


def get_blob_storage(request: Request) -> IBlobStorage:
    """Get where uploaded bytes are stored."""
    return cast(IBlobStorage, _from_state(request, "blob_storage"))


def get_completion_provider(request: Request) -> ICompletionProvider:
    """Get the chat completion provider behind conversations."""
    return cast(ICompletionProvider, _from_state(request, "completion_provider"))


# One transaction per request: session_scope() commits when the endpoint returns and rolls
# back if it raises, before the exception handlers render the error.
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    db = cast(Database, _from_state(request, "db"))
    async with db.session_scope() as session:
        yield session


def get_account_service(
    session: AsyncSession = Depends(get_db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
    hasher: PasswordHasher = Depends(get_password_hasher),
    settings: Settings = Depends(get_app_settings),
) -> AccountService:
    return AccountService(
        users=UserRepository(session),
        issuer=issuer,
        hasher=hasher,
        min_password_length=settings.auth.min_password_length,
    )


def get_subscription_service(
    session: AsyncSession = Depends(get_db_session),
) -> SubscriptionService:
    return SubscriptionService(SubscriptionRepository(session))


def get_folder_service(session: AsyncSession = Depends(get_db_session)) -> FolderService:
    return FolderService(FolderRepository(session))


def get_file_service(
    session: AsyncSession = Depends(get_db_session),
    blobs: IBlobStorage = Depends(get_blob_storage),
    settings: Settings = Depends(get_app_settings),
) -> FileService:
    return FileService(
        files=FileRepository(session),
        folders=FolderRepository(session),
        blobs=blobs,
        max_upload_bytes=settings.storage.max_upload_bytes,
    )


def get_conversation_service(
    session: AsyncSession = Depends(get_db_session),
    completion: ICompletionProvider = Depends(get_completion_provider),
) -> ConversationService:
    return ConversationService(
        conversations=ConversationRepository(session),
        folders=FolderRepository(session),
        completion=completion,
    )


def parse_bearer_token(authorization: str) -> str | None:
    """Extract the token from an Authorization header value.

    Accepts ``Bearer <token>`` (prefix case-insensitive) and a bare token.

    Args:
        authorization: Authorization header value

    Returns:
        The token, or None when nothing usable is left
    """
    value = authorization.strip()
    if value.lower().startswith("bearer "):
        value = value[7:].strip()
    elif value.lower() == "bearer":
        return None
    return value or None


async def get_bearer_token(authorization: str | None = Header(None)) -> str | None:
    """Bearer token of the request, or None if there is none."""
    if not authorization or not authorization.strip():
        return None
    return parse_bearer_token(authorization)


# Hey future me, this is THE guard for every protected endpoint. The two failure statuses are
# NOT interchangeable, clients depend on the difference:
#   no token at all            -> 401 NO_TOKEN
#   token present but rejected -> 403 INVALID_TOKEN / TOKEN_EXPIRED
# The session client refreshes on both, but logs/UX need to know which one happened.
async def get_current_claims(
    token: str | None = Depends(get_bearer_token),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """Validate the bearer token of a protected request.

    Raises:
        AuthenticationError: 401 NO_TOKEN
        AuthorizationError: 403 INVALID_TOKEN or TOKEN_EXPIRED
    """
    if token is None:
        raise AuthenticationError("Access token required", code=ApiErrorCode.NO_TOKEN)

    try:
        return issuer.validate(token)
    except TokenError as e:
        logger.debug("Rejected bearer token: %s", e.code)
        raise AuthorizationError(code=e.code) from e


async def get_current_user_id(claims: TokenClaims = Depends(get_current_claims)) -> int:
    return claims.subject_id
