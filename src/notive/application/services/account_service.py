"""Account service - registration, login, token refresh and profile management.

Hey future me - this is the server-side half of the session protocol. Routers stay
thin: they parse the body, call one method here, and serialize the result. All
failure cases are raised as domain exceptions carrying the wire error code
(MISSING_FIELDS, INVALID_CREDENTIALS, ...) and exception_handlers.py turns them into
``{"success": false, "error": ..., "code": ...}``.

Validation order matters and mirrors what clients already rely on:
register: missing fields -> email format -> password length -> email uniqueness.
login:    missing fields -> email format -> credentials.
"""

import logging
import re

from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.token_issuer import TokenIssuer
from notive.domain.entities import ApiErrorCode, AuthResult, UserIdentity
from notive.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityException,
    EntityNotFoundException,
    TokenError,
    ValidationException,
)
from notive.domain.ports import IUserRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# bcrypt only looks at the first 72 bytes, longer secrets are rejected outright
MAX_PASSWORD_BYTES = 72


def is_valid_email(email: str) -> bool:
    """Cheap shape check: something@something.tld, no whitespace."""
    return bool(EMAIL_PATTERN.match(email))


class AccountService:
    """Credential verification and token issuance for user accounts."""

    def __init__(
        self,
        users: IUserRepository,
        issuer: TokenIssuer,
        hasher: PasswordHasher,
        min_password_length: int = 6,
    ) -> None:
        self._users = users
        self._issuer = issuer
        self._hasher = hasher
        self._min_password_length = min_password_length

    def _check_password_strength(self, password: str) -> None:
        if len(password) < self._min_password_length:
            raise ValidationException(
                f"Password must be at least {self._min_password_length} characters",
                code=ApiErrorCode.WEAK_PASSWORD,
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationException(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                code=ApiErrorCode.WEAK_PASSWORD,
            )

    @staticmethod
    def _check_email(email: str) -> None:
        if not is_valid_email(email):
            raise ValidationException(code=ApiErrorCode.INVALID_EMAIL)

    async def register(
        self, name: str | None, email: str | None, password: str | None
    ) -> AuthResult:
        """Create an account and issue its first token.

        Raises:
            ValidationException: MISSING_FIELDS, INVALID_EMAIL or WEAK_PASSWORD
            DuplicateEntityException: EMAIL_EXISTS
        """
        if not name or not email or not password:
            raise ValidationException(code=ApiErrorCode.MISSING_FIELDS)
        self._check_email(email)
        self._check_password_strength(password)

        if await self._users.email_taken(email):
            raise DuplicateEntityException("User", email)

        password_hash = await self._hasher.hash(password)
        user = await self._users.add(name=name, email=email, password_hash=password_hash)

        logger.info("Registered user %s", user.id)
        return AuthResult(token=self._issuer.issue(user), user=user)

    async def login(self, email: str | None, password: str | None) -> AuthResult:
        """Verify credentials and issue a token.

        Unknown email and wrong password produce the same error (and the same bcrypt
        cost), so the endpoint can't be used to discover registered addresses.

        Raises:
            ValidationException: MISSING_CREDENTIALS or INVALID_EMAIL
            AuthenticationError: INVALID_CREDENTIALS
        """
        if not email or not password:
            raise ValidationException(code=ApiErrorCode.MISSING_CREDENTIALS)
        self._check_email(email)

        user = await self._users.get_by_email(email)
        stored_hash = await self._users.get_password_hash(user.id) if user else None

        if not await self._hasher.verify(password, stored_hash) or user is None:
            logger.info("Rejected login attempt")
            raise AuthenticationError(code=ApiErrorCode.INVALID_CREDENTIALS)

        logger.info("User %s logged in", user.id)
        return AuthResult(token=self._issuer.issue(user), user=user)

    # Hey future me - the refresh endpoint is the ONE place that accepts expired tokens.
    # Signature and structure are still checked, so a forged token never gets through.
    # We only check the user still EXISTS - there's no suspension/lockout concept, a
    # user who was deleted can't refresh, everyone else can.
    async def refresh(self, token: str | None) -> AuthResult:
        """Exchange a (possibly expired) token for a fresh one.

        Raises:
            AuthenticationError: NO_TOKEN, INVALID_TOKEN or USER_NOT_FOUND
        """
        if not token:
            raise AuthenticationError(code=ApiErrorCode.NO_TOKEN)

        try:
            claims = self._issuer.validate_ignoring_expiry(token)
        except TokenError as e:
            logger.info("Refresh rejected: %s", e.message)
            raise AuthenticationError(code=ApiErrorCode.INVALID_TOKEN) from e

        user = await self._users.get_by_id(claims.subject_id)
        if user is None:
            logger.info("Refresh rejected: user %s no longer exists", claims.subject_id)
            raise AuthenticationError(code=ApiErrorCode.USER_NOT_FOUND)

        logger.debug("Refreshed token for user %s", user.id)
        return AuthResult(token=self._issuer.issue(user), user=user)

    async def get_profile(self, user_id: int) -> UserIdentity:
        """Get the current profile.

        Raises:
            EntityNotFoundException: If the account is gone
        """
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundException("User", user_id)
        return user

    async def update_profile(
        self, user_id: int, name: str | None, email: str | None
    ) -> UserIdentity:
        """Replace name and email.

        Raises:
            ValidationException: MISSING_FIELDS or INVALID_EMAIL
            DuplicateEntityException: EMAIL_EXISTS (another account uses the email)
            EntityNotFoundException: If the account is gone
        """
        if not name or not email:
            raise ValidationException(
                "Name and email are required", code=ApiErrorCode.MISSING_FIELDS
            )
        self._check_email(email)

        if await self._users.email_taken(email, exclude_user_id=user_id):
            raise DuplicateEntityException("User", email, message="Email already in use")

        user = await self._users.update_profile(user_id, name=name, email=email)
        if user is None:
            raise EntityNotFoundException("User", user_id)

        logger.info("Updated profile of user %s", user_id)
        return user

    async def change_password(
        self, user_id: int, old_password: str | None, new_password: str | None
    ) -> None:
        """Replace the password after verifying the old one.

        Raises:
            ValidationException: MISSING_FIELDS or WEAK_PASSWORD
            EntityNotFoundException: If the account is gone
            AuthenticationError: INVALID_CREDENTIALS (old password wrong)
        """
        if not old_password or not new_password:
            raise ValidationException(
                "Old and new passwords are required", code=ApiErrorCode.MISSING_FIELDS
            )
        self._check_password_strength(new_password)

        stored_hash = await self._users.get_password_hash(user_id)
        if stored_hash is None:
            raise EntityNotFoundException("User", user_id)

        if not await self._hasher.verify(old_password, stored_hash):
            raise AuthenticationError(
                "Old password is incorrect", code=ApiErrorCode.INVALID_CREDENTIALS
            )

        await self._users.update_password(user_id, await self._hasher.hash(new_password))
        logger.info("Changed password of user %s", user_id)
