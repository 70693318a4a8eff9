"""Turning failed API responses into ApiError."""

from typing import Any

import httpx

from notive.domain.entities.error_codes import get_error_message, kind_for_code
from notive.domain.exceptions import ApiError


def error_from_response(response: httpx.Response) -> ApiError:
    """Build an ApiError from a non-2xx response.

    Understands the ``{"success": false, "error": ..., "code": ...}`` body and
    falls back to the HTTP status for bodies without a usable code (proxy pages,
    FastAPI's ``{"detail": ...}``).
    """
    code: str | None = None
    message: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        raw_code = body.get("code")
        code = raw_code if isinstance(raw_code, str) else None
        raw_message = body.get("error") or body.get("detail")
        message = raw_message if isinstance(raw_message, str) else None

    kind = kind_for_code(code, response.status_code)
    return ApiError(
        message or (get_error_message(code) if code else f"HTTP {response.status_code}"),
        code=code,
        status_code=response.status_code,
        kind=kind,
    )


def json_or_raise(response: httpx.Response) -> dict[str, Any]:
    """Return the JSON object of a 2xx response, raise ApiError otherwise.

    Raises:
        ApiError: Non-2xx status, or a 2xx body that is not a JSON object
    """
    if not response.is_success:
        raise error_from_response(response)
    try:
        data = response.json()
    except ValueError as e:
        raise ApiError(
            "Malformed response from server", status_code=response.status_code
        ) from e
    if not isinstance(data, dict):
        raise ApiError("Malformed response from server", status_code=response.status_code)
    return data
