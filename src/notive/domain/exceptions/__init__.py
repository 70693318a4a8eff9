"""Domain exceptions."""

from typing import Any

from notive.domain.entities.error_codes import (
    ApiErrorCode,
    ErrorKind,
    get_error_message,
    kind_for_code,
)


class DomainException(Exception):
    """Base exception for all domain exceptions.

    Every domain exception carries a wire-level ``code`` so the API layer can
    render ``{"success": false, "error": message, "code": code}`` without
    guessing. Don't raise this directly, use a subclass.
    """

    default_code: str = ApiErrorCode.SERVER_ERROR

    def __init__(self, message: str | None = None, *args: Any, code: str | None = None) -> None:
        resolved_code = code or self.default_code
        resolved_message = message or get_error_message(resolved_code)
        super().__init__(resolved_message, *args)
        self.message = resolved_message
        self.code = resolved_code

    @property
    def kind(self) -> ErrorKind:
        """ErrorKind of this exception's code."""
        return kind_for_code(self.code)


class ValidationException(DomainException):
    """Raised when input fails validation (missing fields, bad email, weak password).

    HTTP Status: 400
    """

    default_code = ApiErrorCode.MISSING_FIELDS


class AuthenticationError(DomainException):
    """Credentials or token were not accepted.

    HTTP Status: 401

    Example:
        raise AuthenticationError(code=ApiErrorCode.INVALID_CREDENTIALS)
    """

    default_code = ApiErrorCode.INVALID_CREDENTIALS


class AuthorizationError(DomainException):
    """A presented token failed validation on a protected endpoint.

    HTTP Status: 403. Kept distinct from AuthenticationError so the client can tell
    "you sent nothing" (401) from "what you sent is no good" (403).
    """

    default_code = ApiErrorCode.INVALID_TOKEN


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found.

    HTTP Status: 404
    """

    default_code = ApiErrorCode.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when a uniqueness rule is violated (email already registered).

    HTTP Status: 409
    """

    default_code = ApiErrorCode.EMAIL_EXISTS

    def __init__(self, entity_type: str, entity_id: Any, message: str | None = None) -> None:
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConfigurationError(DomainException):
    """Application misconfiguration (e.g. default JWT secret in production)."""


class CompletionError(DomainException):
    """The AI completion service failed, timed out, or is not configured.

    HTTP Status: 502 (NETWORK kind, no dedicated handler)
    """

    default_code = ApiErrorCode.AI_UNAVAILABLE


# =============================================================================
# Token validation failures
# Hey future me - these are raised by TokenIssuer and NEVER leave the server as-is.
# The API layer turns them into 403 INVALID_TOKEN / TOKEN_EXPIRED (protected routes)
# or 401 INVALID_TOKEN (refresh endpoint).
# =============================================================================


class TokenError(DomainException):
    """Base class for token validation failures."""

    default_code = ApiErrorCode.INVALID_TOKEN


class InvalidSignatureError(TokenError):
    """Token signature does not match the server secret."""


class MalformedTokenError(TokenError):
    """Token is not a decodable JWT or lacks required claims."""


class TokenExpiredError(TokenError):
    """Token is correctly signed but past its expiry."""

    default_code = ApiErrorCode.TOKEN_EXPIRED


# =============================================================================
# Client-side exceptions
# =============================================================================


class IncompleteCredentialsError(DomainException):
    """Raised by the credential store when token or user is missing on save."""

    default_code = ApiErrorCode.INVALID_REQUEST

    def __init__(self, message: str = "Authentication data incomplete") -> None:
        super().__init__(message)


class ApiError(DomainException):
    """A non-2xx API response, classified.

    Raised by the API clients (AuthApiClient, FoldersApiClient) after the session
    client has done its refresh/retry dance. ``status_code`` is None for
    transport failures.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message, code=code or ApiErrorCode.SERVER_ERROR)
        self.status_code = status_code
        self._kind = kind or kind_for_code(code, status_code)

    @property
    def kind(self) -> ErrorKind:
        return self._kind


__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "CompletionError",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "IncompleteCredentialsError",
    "InvalidSignatureError",
    "MalformedTokenError",
    "TokenError",
    "TokenExpiredError",
    "ValidationException",
]
