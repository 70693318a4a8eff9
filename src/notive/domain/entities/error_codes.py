"""API error codes - standardized error classification.

Hey future me - this module is the ONE place that decides what kind of failure
an error code is. The server puts these codes in every error body
(``{"success": false, "error": ..., "code": ...}``) and the client maps them
back onto ErrorKind instead of pattern-matching message strings.

ERROR KINDS:

- VALIDATION: bad or missing input. Never retried, shown next to the field.
- AUTH: bad credentials or bad/expired token. Expired tokens start the refresh
  protocol in the session client, everything else is terminal.
- CONFLICT: uniqueness violations (email already registered). Terminal.
- NOT_FOUND: the addressed resource does not exist (or isn't yours).
- NETWORK: transport failures and timeouts, including the AI completion service
  being unreachable (502 AI_UNAVAILABLE). Passed through, never retried.
- SERVER: 5xx and anything we can't classify.

USAGE:
    from notive.domain.entities.error_codes import ApiErrorCode, kind_for_code

    if kind_for_code(body.get("code"), response.status_code) is ErrorKind.CONFLICT:
        ...
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure categories surfaced to collaborators."""

    VALIDATION = "validation"
    AUTH = "auth"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    SERVER = "server"


class ApiErrorCode(StrEnum):
    """Wire-level error codes returned by the API."""

    # Validation
    MISSING_FIELDS = "MISSING_FIELDS"
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    INVALID_EMAIL = "INVALID_EMAIL"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_PLAN = "INVALID_PLAN"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    NO_FILE = "NO_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    NO_MESSAGES = "NO_MESSAGES"

    # Authentication
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NO_TOKEN = "NO_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Conflict
    EMAIL_EXISTS = "EMAIL_EXISTS"

    # Not found
    NOT_FOUND = "NOT_FOUND"

    # Transport / server
    NETWORK_ERROR = "NETWORK_ERROR"
    AI_UNAVAILABLE = "AI_UNAVAILABLE"
    SERVER_ERROR = "SERVER_ERROR"


ERROR_KINDS: dict[str, ErrorKind] = {
    ApiErrorCode.MISSING_FIELDS: ErrorKind.VALIDATION,
    ApiErrorCode.MISSING_CREDENTIALS: ErrorKind.VALIDATION,
    ApiErrorCode.INVALID_EMAIL: ErrorKind.VALIDATION,
    ApiErrorCode.WEAK_PASSWORD: ErrorKind.VALIDATION,
    ApiErrorCode.INVALID_PLAN: ErrorKind.VALIDATION,
    ApiErrorCode.INVALID_REQUEST: ErrorKind.VALIDATION,
    ApiErrorCode.INVALID_FILE_TYPE: ErrorKind.VALIDATION,
    ApiErrorCode.NO_FILE: ErrorKind.VALIDATION,
    ApiErrorCode.FILE_TOO_LARGE: ErrorKind.VALIDATION,
    ApiErrorCode.NO_MESSAGES: ErrorKind.VALIDATION,
    ApiErrorCode.INVALID_CREDENTIALS: ErrorKind.AUTH,
    ApiErrorCode.NO_TOKEN: ErrorKind.AUTH,
    ApiErrorCode.INVALID_TOKEN: ErrorKind.AUTH,
    ApiErrorCode.TOKEN_EXPIRED: ErrorKind.AUTH,
    ApiErrorCode.USER_NOT_FOUND: ErrorKind.AUTH,
    ApiErrorCode.EMAIL_EXISTS: ErrorKind.CONFLICT,
    ApiErrorCode.NOT_FOUND: ErrorKind.NOT_FOUND,
    ApiErrorCode.NETWORK_ERROR: ErrorKind.NETWORK,
    ApiErrorCode.AI_UNAVAILABLE: ErrorKind.NETWORK,
    ApiErrorCode.SERVER_ERROR: ErrorKind.SERVER,
}

# Human-readable defaults, used when an exception is raised without a message
ERROR_MESSAGES: dict[str, str] = {
    ApiErrorCode.MISSING_FIELDS: "All fields are required",
    ApiErrorCode.MISSING_CREDENTIALS: "Email and password are required",
    ApiErrorCode.INVALID_EMAIL: "Invalid email format",
    ApiErrorCode.WEAK_PASSWORD: "Password must be at least 6 characters",
    ApiErrorCode.INVALID_PLAN: "Invalid plan",
    ApiErrorCode.INVALID_REQUEST: "Invalid request",
    ApiErrorCode.INVALID_FILE_TYPE: "Use /upload for media/documents",
    ApiErrorCode.NO_FILE: "No file uploaded",
    ApiErrorCode.FILE_TOO_LARGE: "File is too large",
    ApiErrorCode.NO_MESSAGES: "No messages found in conversation",
    ApiErrorCode.INVALID_CREDENTIALS: "Invalid credentials",
    ApiErrorCode.NO_TOKEN: "No token provided",
    ApiErrorCode.INVALID_TOKEN: "Invalid token",
    ApiErrorCode.TOKEN_EXPIRED: "Token expired",
    ApiErrorCode.USER_NOT_FOUND: "User not found",
    ApiErrorCode.EMAIL_EXISTS: "Email already registered",
    ApiErrorCode.NOT_FOUND: "Resource not found",
    ApiErrorCode.NETWORK_ERROR: "Network error",
    ApiErrorCode.AI_UNAVAILABLE: "AI service unavailable",
    ApiErrorCode.SERVER_ERROR: "Internal server error",
}


def kind_for_status(status_code: int) -> ErrorKind:
    """Classify a bare HTTP status code.

    Used when a response carries no (or an unknown) error code, e.g. a
    proxy error page or a plain ``403`` without body.

    Args:
        status_code: HTTP status of the failed response

    Returns:
        The matching ErrorKind
    """
    if status_code in (401, 403):
        return ErrorKind.AUTH
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if 400 <= status_code < 500:
        return ErrorKind.VALIDATION
    return ErrorKind.SERVER


def kind_for_code(code: str | None, status_code: int | None = None) -> ErrorKind:
    """Classify an error code, falling back to the HTTP status.

    Args:
        code: Error code from the response body (may be None or unknown)
        status_code: HTTP status, used when the code is not recognised

    Returns:
        The matching ErrorKind (SERVER when nothing is known)
    """
    if code is not None and code in ERROR_KINDS:
        return ERROR_KINDS[code]
    if status_code is not None:
        return kind_for_status(status_code)
    return ErrorKind.SERVER


def get_error_message(code: str | None) -> str:
    """Get the default human-readable message for an error code."""
    if code is None:
        return "Unknown error"
    return ERROR_MESSAGES.get(code, f"Unknown error: {code}")
