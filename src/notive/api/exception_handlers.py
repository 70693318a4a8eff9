"""Custom exception handlers for the FastAPI application.

Every error leaves the server in ONE shape:

    {"success": false, "error": "<human readable>", "code": "<MACHINE_CODE>"}

Clients switch on ``code`` (see notive.domain.entities.error_codes), never on the
message text. Domain exceptions already carry their code, the handlers here only
pick the HTTP status and log.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notive.domain.entities import ApiErrorCode, ErrorKind
from notive.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    TokenError,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Status for domain exceptions that have no dedicated handler
_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NETWORK: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SERVER: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_CODE_BY_HTTP_STATUS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: ApiErrorCode.INVALID_REQUEST,
    status.HTTP_401_UNAUTHORIZED: ApiErrorCode.NO_TOKEN,
    status.HTTP_403_FORBIDDEN: ApiErrorCode.INVALID_TOKEN,
    status.HTTP_404_NOT_FOUND: ApiErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ApiErrorCode.NOT_FOUND,
}


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    """Build the standard error body."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code},
    )


def _describe_validation_errors(errors: list[Any]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation and HTTP exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> JSONResponse:
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.code,
            extra={"path": request.url.path, "code": exc.code},
        )
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.code)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.info(
            "Authentication failed at %s: %s",
            request.url.path,
            exc.code,
            extra={"path": request.url.path, "code": exc.code},
        )
        return error_response(status.HTTP_401_UNAUTHORIZED, exc.message, exc.code)

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        logger.info(
            "Token rejected at %s: %s",
            request.url.path,
            exc.code,
            extra={"path": request.url.path, "code": exc.code},
        )
        return error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.code)

    # A TokenError reaching this point was raised outside get_current_claims; it is still
    # a rejected token, so it gets the same 403 as the guard would give.
    @app.exception_handler(TokenError)
    async def token_error_handler(request: Request, exc: TokenError) -> JSONResponse:
        logger.info(
            "Token rejected at %s: %s",
            request.url.path,
            exc.code,
            extra={"path": request.url.path, "code": exc.code},
        )
        return error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.code)

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_exception_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": exc.entity_id,
            },
        )
        return error_response(status.HTTP_404_NOT_FOUND, exc.message, exc.code)

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_exception_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        logger.warning(
            "Duplicate entity at %s: %s",
            request.url.path,
            exc.entity_type,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return error_response(status.HTTP_409_CONFLICT, exc.message, exc.code)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, exc.message, ApiErrorCode.SERVER_ERROR
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(
            "Unhandled %s at %s: %s",
            type(exc).__name__,
            request.url.path,
            exc.code,
            extra={"path": request.url.path, "code": exc.code},
        )
        return error_response(status_code, exc.message, exc.code)

    # Hey future me - bodies are optional-field models on purpose, so "missing name" is a
    # MISSING_FIELDS decided by the service. What still lands here is garbage: broken JSON,
    # a string where an int belongs. That's a plain 400 INVALID_REQUEST, not FastAPI's 422.
    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _describe_validation_errors(list(exc.errors()))
        logger.info(
            "Request validation error at %s: %s",
            request.url.path,
            message,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, message, ApiErrorCode.INVALID_REQUEST
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        code = _CODE_BY_HTTP_STATUS.get(exc.status_code, ApiErrorCode.SERVER_ERROR)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail), "code": code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error at %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            ApiErrorCode.SERVER_ERROR,
        )
